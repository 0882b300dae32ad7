# error.py
"""Error taxonomy shared by every symcalc module.

Every error carries a four-digit code (see ERROR_MESSAGES), a detail message
and, once it has passed through MathEngine.calculate, the equation it was
raised for.
"""


class MathError(Exception):
    code = "9999"

    def __init__(self, message, code=None, equation=None):
        super().__init__(message)
        self.message = message
        self.code = code or self.code
        self.equation = equation

    def describe(self):
        """Human-readable text for the UI: code, headline and details."""
        headline = ERROR_MESSAGES.get(self.code, ERROR_MESSAGES["9999"])
        return f"Error {self.code}: {headline} {self.message}".strip()

    @property
    def category(self):
        """Error family named by the first digit of the code."""
        return Error_Dictionary.get(self.code[:1], "Unknown Error")


class SyntaxError(MathError):
    code = "3011"

    def __init__(self, message, position=None, char=None, code=None, equation=None):
        super().__init__(message, code=code, equation=equation)
        self.position = position
        self.char = char


class UnmatchedParenthesisError(SyntaxError):
    code = "3009"


class NumberFormatError(SyntaxError):
    code = "3008"

    def __init__(self, message, raw=None, position=None, code=None, equation=None):
        super().__init__(message, position=position, code=code, equation=equation)
        self.raw = raw


class CalculationError(MathError):
    code = "3000"


class MissingOperandError(CalculationError):
    code = "3027"


class MalformedExpressionError(CalculationError):
    code = "3012"


class UnknownVariableError(CalculationError):
    code = "3002"

    def __init__(self, name, code=None, equation=None):
        super().__init__(f"Unknown variable '{name}'", code=code, equation=equation)
        self.name = name


class UnknownFunctionError(CalculationError):
    code = "2004"

    def __init__(self, name, code=None, equation=None):
        super().__init__(f"Unknown function '{name}'", code=code, equation=equation)
        self.name = name


class WrongArityError(CalculationError):
    code = "2005"

    def __init__(self, name, expected, got, code=None, equation=None):
        super().__init__(f"'{name}' expects {expected} argument(s), got {got}", code=code, equation=equation)
        self.name = name
        self.expected = expected
        self.got = got


class NumberOverflowError(CalculationError):
    code = "3026"


class NonFiniteError(CalculationError):
    code = "3003"


class SymbolicError(CalculationError):
    code = "3030"


class PrecisionUnavailableError(MathError):
    code = "2505"


class BackendError(MathError):
    code = "6000"


Error_Dictionary = {

    "1": "Missing Files",
    "2": "Scientific Calculation Error",
    "3": "Calculator Error",
    "4": "UI Error",
    "5": "Configuration Error",
    "6": "Communication Error",
    "7": "Runtime Error"

}

# Error Messages are structured in:
# 1. Digit: Main Error
# 2. Digit: Specification
# 3. and 4. Digit: Error Number

ERROR_MESSAGES = {
    "1000": "Required files are missing.",

    "2004": "Unknown function.",
    "2005": "Wrong number of function arguments.",
    "2505": "Requested precision is not available.",

    "3000": "Calculation error.",
    "3002": "Unknown variable.",
    "3003": "Result is not a finite number.",
    "3008": "Invalid number literal.",
    "3009": "Unbalanced parentheses.",
    "3011": "Unexpected token.",
    "3012": "Invalid expression.",
    "3026": "Number too big.",
    "3027": "Missing operand.",
    "3030": "Invalid symbolic operation.",

    "4002": "Calculation already running!",
    "4501": "Not all settings could be saved.",

    "6000": "Compile-and-run backend failed.",

    "9999": "Unexpected error."
}
