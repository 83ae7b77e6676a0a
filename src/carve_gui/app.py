import tkinter as tk
from tkinter import ttk, filedialog, messagebox
from tkinter.scrolledtext import ScrolledText
import logging
import threading

from mp3carve.carve_exceptions import CarveError
from mp3carve.config import CarveConfig, parse_phases
from mp3carve.extract import THRESHOLD
from mp3carve.pipeline import analyze_file, carve_files

class _PaneHandler(logging.Handler):
    """Forward log records to the app's log pane on the Tk thread."""

    def __init__(self, app: "App"):
        super().__init__(level=logging.INFO)
        self.app = app
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record):
        msg = self.format(record)
        self.app.after(0, lambda m=msg: self.app._log(m))

class App(tk.Tk):
    def __init__(self):
        super().__init__()
        self.title("MP3 Carver")
        self.geometry("880x600")
        self.files: list = []
        self.outdir_var = tk.StringVar()
        self.threshold_var = tk.IntVar(value=THRESHOLD)
        self.phases_var = tk.StringVar(value="0,1,2,3")
        self.jobs_var = tk.IntVar(value=1)
        self.dry_var = tk.BooleanVar(value=False)

        self._build()
        self.handler = _PaneHandler(self)
        logging.getLogger("mp3carve").addHandler(self.handler)
        logging.getLogger("mp3carve").setLevel(logging.INFO)

    def _setup_style(self):
        style = ttk.Style(self)
        try:
            style.theme_use("clam")
        except tk.TclError:
            pass
        style.configure("Title.TLabel", font=("Segoe UI", 16, "bold"))
        style.configure("Accent.TButton", font=("Segoe UI", 10, "bold"))
        style.configure("Card.TFrame", padding=10)

    def _build(self):
        self._setup_style()

        header = ttk.Frame(self, style="Card.TFrame")
        header.pack(fill="x", padx=8, pady=(8, 0))
        ttk.Label(header, text="MP3 Carver", style="Title.TLabel").pack(side="left")

        f = ttk.Frame(self, style="Card.TFrame")
        f.pack(fill="x", padx=8, pady=(4, 6))
        pad = dict(padx=6, pady=4, sticky="w")

        ttk.Label(f, text="Input files:").grid(row=0, column=0, **pad)
        self.files_list = tk.Listbox(f, height=5, width=70)
        self.files_list.grid(row=0, column=1, **pad)
        btns = ttk.Frame(f); btns.grid(row=0, column=2, sticky="n", padx=6, pady=4)
        ttk.Button(btns, text="Add...", command=self._pick_files).pack(fill="x")
        ttk.Button(btns, text="Clear", command=self._clear_files).pack(fill="x", pady=(4, 0))

        ttk.Label(f, text="Output folder:").grid(row=1, column=0, **pad)
        ttk.Entry(f, textvariable=self.outdir_var, width=70).grid(row=1, column=1, **pad)
        ttk.Button(f, text="Browse...", command=self._pick_outdir).grid(row=1, column=2, **pad)

        frm = ttk.Frame(f); frm.grid(row=2, column=0, columnspan=3, sticky="w", padx=6, pady=4)
        ttk.Label(frm, text="Threshold (bytes):").grid(row=0, column=0, padx=6)
        ttk.Entry(frm, textvariable=self.threshold_var, width=10).grid(row=0, column=1, padx=4)
        ttk.Label(frm, text="Phases:").grid(row=0, column=2, padx=6)
        ttk.Entry(frm, textvariable=self.phases_var, width=10).grid(row=0, column=3, padx=4)
        ttk.Label(frm, text="Jobs:").grid(row=0, column=4, padx=6)
        ttk.Spinbox(frm, from_=1, to=32, width=5, textvariable=self.jobs_var).grid(row=0, column=5, padx=4)
        ttk.Checkbutton(frm, text="Dry run", variable=self.dry_var).grid(row=0, column=6, padx=8)

        act = ttk.Frame(f); act.grid(row=3, column=0, columnspan=3, sticky="w", padx=6, pady=4)
        self.btn_run = ttk.Button(act, text="Carve", command=self._run, style="Accent.TButton")
        self.btn_run.pack(side="left", padx=5)
        ttk.Button(act, text="Analyze MP3...", command=self._analyze).pack(side="left", padx=5)
        f.grid_columnconfigure(1, weight=1)

        ttk.Separator(self, orient="horizontal").pack(fill="x", padx=8, pady=(2, 4))
        self.log = ScrolledText(self, height=20, font=("Consolas", 10), wrap="word")
        self.log.pack(fill="both", expand=True, padx=8, pady=(0, 6))

    def _pick_files(self):
        fns = filedialog.askopenfilenames(title="Pick container files", filetypes=[("All files", "*.*")])
        for fn in fns:
            if fn not in self.files:
                self.files.append(fn); self.files_list.insert("end", fn)

    def _clear_files(self):
        self.files.clear(); self.files_list.delete(0, "end")

    def _pick_outdir(self):
        dn = filedialog.askdirectory(title="Pick output folder")
        if dn: self.outdir_var.set(dn)

    def _log(self, msg: str):
        self.log.insert("end", msg + "\n")
        self.log.see("end")

    def _config(self) -> CarveConfig:
        return CarveConfig(
            threshold=int(self.threshold_var.get()),
            phases=parse_phases(self.phases_var.get()),
            outdir=self.outdir_var.get().strip() or None,
            jobs=int(self.jobs_var.get()),
            dry_run=bool(self.dry_var.get()),
        ).validate()

    def _run(self):
        if not self.files:
            messagebox.showwarning("Missing", "Add at least one input file."); return
        try:
            config = self._config()
        except (ValueError, tk.TclError) as e:
            messagebox.showerror("Settings", str(e)); return
        files = list(self.files)

        def task():
            self.after(0, lambda: self.btn_run.configure(state="disabled"))
            try:
                results = carve_files(files, config)
                total = sum(len(v) for v in results.values())
                failed = len(files) - len(results)
                self.after(0, lambda: self._log(f"Done: {total} stream(s) from {len(results)} file(s), {failed} failed"))
            finally:
                self.after(0, lambda: self.btn_run.configure(state="normal"))
        threading.Thread(target=task, daemon=True).start()

    def _analyze(self):
        fn = filedialog.askopenfilename(title="Pick recovered MP3", filetypes=[("MP3 files", "*.mp3"), ("All files", "*.*")])
        if not fn:
            return
        try:
            st = analyze_file(fn)
        except CarveError as e:
            messagebox.showerror("Analyze", str(e)); return
        self._log(f"{fn}: {st['total_frames']} frames, {st['padded_frames']} padded, "
                  f"{'VBR' if st['vbr'] else 'CBR'}, {st['duration_sec']:.2f}s")

def main():
    App().mainloop()

if __name__ == "__main__":
    main()
