# error.py
"""Error types shared by the expression engine, the codec and the controller.

Every error carries a four digit code (see ERROR_MESSAGES); the message
defaults to the catalogue text for that code.
"""


class MathError(Exception):
    def __init__(self, message=None, code="9999", equation=None):
        if message is None:
            message = ERROR_MESSAGES.get(code, ERROR_MESSAGES["9999"])
        super().__init__(message)
        self.message = message
        self.code = code
        self.equation = equation

    @property
    def category(self):
        """Top level category of the error code, e.g. "Calculator Error"."""
        return Error_Dictionary.get(self.code[:1], Error_Dictionary["9"])

class SyntaxError(MathError):
    pass

class CalculationError(MathError):
    pass

class FormatError(MathError):
    pass


Error_Dictionary= {

    "2" : "Scientific Calculation Error",
    "3" : "Calculator Error",
    "6" : "Save Format Error",
    "9" : "Runtime Error"

}

#Error Messages are structured in:
# 1. Digit: Main Error
# 2. Digit: Specification
# 3. and 4. Digit: Error Number



ERROR_MESSAGES = {
    "2001" : "Logarithm of a non-positive number.",
    "2002" : "Square root of a negative number.",
    "2003" : "Inverse trigonometric argument out of range.",
    "2004" : "Tangent undefined.",


    "3003" : "Division by Zero",
    "3011" : "Unrecognized token in expression.",
    "3012" : "Unexpected expression end.",
    "3013" : "Failed to parse full expression.",
    "3026" : "Number too big.",
    "3027" : "Expression too complex.",
    "3030" : "Factorial of non-integer.",
    "3031" : "Factorial of negative number.",


    "6000" : "Bad save file format.",
    "6001" : "Truncated save data.",
    "6002" : "Saved subexpression could not be evaluated.",
    "6003" : "Unknown operator id in save data.",
    "6004" : "String too long to save.",
    "6005" : "Saved expression nested too deeply.",



    "9999" : "Unexpected Error: " #+error
}
