class CarveError(Exception): ...
class InputError(CarveError): ...
class OutputError(CarveError): ...
