# KeyMaps.py
"""Input identifiers for the calculator keypad and their meaning.

A Key is what the user presses. Its integer value is also what gets saved
for operator tokens, so existing values must never be renumbered.
"""

from enum import IntEnum

from . import config_manager as config_manager


class Key(IntEnum):
    DIGIT_0 = 0
    DIGIT_1 = 1
    DIGIT_2 = 2
    DIGIT_3 = 3
    DIGIT_4 = 4
    DIGIT_5 = 5
    DIGIT_6 = 6
    DIGIT_7 = 7
    DIGIT_8 = 8
    DIGIT_9 = 9
    DEC_POINT = 10

    OP_ADD = 20
    OP_SUB = 21
    OP_MUL = 22
    OP_DIV = 23
    OP_POW = 24

    OP_SQRT = 30
    OP_FACT = 31
    OP_SQR = 32
    OP_PCT = 33

    LPAREN = 40
    RPAREN = 41

    FUN_SIN = 50
    FUN_COS = 51
    FUN_TAN = 52
    FUN_ARCSIN = 53
    FUN_ARCCOS = 54
    FUN_ARCTAN = 55
    FUN_LN = 56
    FUN_LOG = 57
    FUN_EXP = 58

    CONST_PI = 70
    CONST_E = 71


NOT_DIGIT = -1

BINARY_OPERATORS = (Key.OP_ADD, Key.OP_SUB, Key.OP_MUL, Key.OP_DIV, Key.OP_POW)
SUFFIX_OPERATORS = (Key.OP_FACT, Key.OP_SQR, Key.OP_PCT)
FUNCTIONS = (Key.FUN_SIN, Key.FUN_COS, Key.FUN_TAN,
             Key.FUN_ARCSIN, Key.FUN_ARCCOS, Key.FUN_ARCTAN,
             Key.FUN_LN, Key.FUN_LOG, Key.FUN_EXP)

# Used when ui_strings.json is missing or incomplete
DEFAULT_STRINGS = {
    Key.DEC_POINT: ".",
    Key.OP_ADD: "+",
    Key.OP_SUB: "−",
    Key.OP_MUL: "×",
    Key.OP_DIV: "÷",
    Key.OP_POW: "^",
    Key.OP_SQRT: "√",
    Key.OP_FACT: "!",
    Key.OP_SQR: "²",
    Key.OP_PCT: "%",
    Key.LPAREN: "(",
    Key.RPAREN: ")",
    Key.FUN_SIN: "sin(",
    Key.FUN_COS: "cos(",
    Key.FUN_TAN: "tan(",
    Key.FUN_ARCSIN: "arcsin(",
    Key.FUN_ARCCOS: "arccos(",
    Key.FUN_ARCTAN: "arctan(",
    Key.FUN_LN: "ln(",
    Key.FUN_LOG: "log(",
    Key.FUN_EXP: "exp(",
    Key.CONST_PI: "π",
    Key.CONST_E: "e",
}

# Single characters accepted from typed or pasted text
CHAR_KEYS = {
    ".": Key.DEC_POINT,
    ",": Key.DEC_POINT,
    "+": Key.OP_ADD,
    "-": Key.OP_SUB,
    "−": Key.OP_SUB,
    "*": Key.OP_MUL,
    "×": Key.OP_MUL,
    "/": Key.OP_DIV,
    "÷": Key.OP_DIV,
    "^": Key.OP_POW,
    "√": Key.OP_SQRT,
    "!": Key.OP_FACT,
    "²": Key.OP_SQR,
    "%": Key.OP_PCT,
    "(": Key.LPAREN,
    ")": Key.RPAREN,
    "π": Key.CONST_PI,
    "e": Key.CONST_E,
    "E": Key.CONST_E,
}

# Function names as typed; longer names first so "arcsin(" wins over "sin("
FUNCTION_NAMES = (
    ("arcsin(", Key.FUN_ARCSIN),
    ("arccos(", Key.FUN_ARCCOS),
    ("arctan(", Key.FUN_ARCTAN),
    ("asin(", Key.FUN_ARCSIN),
    ("acos(", Key.FUN_ARCCOS),
    ("atan(", Key.FUN_ARCTAN),
    ("sqrt(", Key.OP_SQRT),
    ("sin(", Key.FUN_SIN),
    ("cos(", Key.FUN_COS),
    ("tan(", Key.FUN_TAN),
    ("exp(", Key.FUN_EXP),
    ("log(", Key.FUN_LOG),
    ("ln(", Key.FUN_LN),
)


def dig_val(key):
    """Return the digit value of key, or NOT_DIGIT."""
    if Key.DIGIT_0 <= key <= Key.DIGIT_9:
        return int(key)
    return NOT_DIGIT


def digit_key(value):
    return Key(value)


def is_binary(key):
    return key in BINARY_OPERATORS


def is_suffix(key):
    return key in SUFFIX_OPERATORS


def is_function(key):
    return key in FUNCTIONS


def to_string(key):
    """Human readable text for a key, as shown in the formula."""
    if dig_val(key) != NOT_DIGIT:
        return translate_result(str(dig_val(key)))
    strings = config_manager.load_setting_description("keys")
    if isinstance(strings, dict) and Key(key).name.lower() in strings:
        return strings[Key(key).name.lower()]
    return DEFAULT_STRINGS[Key(key)]


def translate_result(text):
    """Localize a machine-readable number string for display."""
    separator = config_manager.load_setting_value("decimal_separator")
    if not separator or separator == ".":
        return text
    return text.replace(".", separator)


def key_for_char(c):
    """Return the key for a single typed character, or None."""
    if c.isdigit() and c.isascii():
        return digit_key(int(c))
    return CHAR_KEYS.get(c)


def fun_for_string(text, pos):
    """Return (key, length) of a function name starting at text[pos], or None.

    The match includes the opening parenthesis.
    """
    for name, key in FUNCTION_NAMES:
        if text.startswith(name, pos):
            return key, len(name)
    if text.startswith("pi", pos):
        return Key.CONST_PI, 2
    return None
