# Serializer.py
"""
Binary save format for expressions.

Layout (big endian)
-------------------
expression   := int32 count, token * count
token        := byte tag, payload
  LITERAL    := utf whole, bool saw_decimal, utf fraction
  OPERATOR   := int32 key id
  PRE_EVAL   := int32 index [expression, bool degree_mode, utf short_rep]
utf          := uint16 byte length, UTF-8 bytes

A PreEvaluated token is written in full only the first time its value object
is seen in an encoding pass; later occurrences write just the index. Two
tokens count as the same if they share the identical LazyReal object, not
merely an equal value. On reading, the first occurrence of an index is
re-evaluated once and every later reference returns the same token.

Sessions belong to exactly one pass. dumps()/loads() create their own.
"""

import io
import logging
import struct

from . import MathEngine
from . import error as E
from .Expression import Expression
from .KeyMaps import Key
from .Tokens import EvalContext, Literal, Operator, PreEvaluated, TokenKind

logger = logging.getLogger(__name__)

_INT = struct.Struct(">i")
_SHORT = struct.Struct(">H")


# -----------------------------
# Stream boundary
# -----------------------------

class DataWriter:
    def __init__(self, stream):
        self.stream = stream

    def _write(self, data):
        try:
            self.stream.write(data)
        except OSError as e:
            raise E.FormatError(f"Could not write save data: {e}", code="6000") from e

    def write_byte(self, value):
        self._write(bytes((value,)))

    def write_boolean(self, value):
        self.write_byte(1 if value else 0)

    def write_int(self, value):
        self._write(_INT.pack(value))

    def write_utf(self, text):
        data = text.encode("utf-8")
        if len(data) > 0xFFFF:
            raise E.FormatError(code="6004")
        self._write(_SHORT.pack(len(data)) + data)


class DataReader:
    def __init__(self, stream):
        self.stream = stream

    def _read(self, n):
        try:
            data = self.stream.read(n)
        except OSError as e:
            raise E.FormatError(f"Could not read save data: {e}", code="6001") from e
        if data is None or len(data) < n:
            raise E.FormatError(code="6001")
        return data

    def read_byte(self):
        return self._read(1)[0]

    def read_boolean(self):
        return self.read_byte() != 0

    def read_int(self):
        return _INT.unpack(self._read(4))[0]

    def read_utf(self):
        (length,) = _SHORT.unpack(self._read(2))
        try:
            return self._read(length).decode("utf-8")
        except UnicodeDecodeError as e:
            raise E.FormatError("Invalid text in save data", code="6000") from e


# -----------------------------
# Sessions
# -----------------------------

class EncodeSession:
    """Identity map from value objects to indices for one encoding pass."""

    def __init__(self):
        self._indices = {}
        self._values = []   # keeps ids stable for the duration of the pass
        self._next_index = 0

    def __len__(self):
        return len(self._values)

    def lookup(self, value):
        return self._indices.get(id(value))

    def register(self, value):
        self._next_index += 1
        self._indices[id(value)] = self._next_index
        self._values.append(value)
        return self._next_index


class DecodeSession:
    """Index to reconstructed PreEvaluated token for one decoding pass."""

    def __init__(self):
        self._tokens = {}

    def lookup(self, index):
        return self._tokens.get(index)

    def register(self, index, token):
        self._tokens[index] = token


# -----------------------------
# Encoding
# -----------------------------

def write_token(token, out, session):
    if isinstance(token, Literal):
        out.write_byte(TokenKind.LITERAL)
        out.write_utf(token.whole)
        out.write_boolean(token.saw_decimal)
        out.write_utf(token.fraction)
    elif isinstance(token, Operator):
        out.write_byte(TokenKind.OPERATOR)
        out.write_int(int(token.key))
    elif isinstance(token, PreEvaluated):
        out.write_byte(TokenKind.PRE_EVAL)
        index = session.lookup(token.value)
        if index is not None:
            out.write_int(index)
            return
        out.write_int(session.register(token.value))
        write_expr(token.expr, out, session)
        out.write_boolean(token.context.degree_mode)
        out.write_utf(token.short_rep)
    else:
        raise E.FormatError(f"Cannot save token {token!r}", code="6000")


def write_expr(expr, out, session):
    tokens = expr.tokens
    out.write_int(len(tokens))
    for token in tokens:
        write_token(token, out, session)


# -----------------------------
# Decoding
# -----------------------------

def _read_pre_eval(inp, session):
    index = inp.read_int()
    previous = session.lookup(index)
    if previous is not None:
        return previous
    try:
        expr = read_expr(inp, session)
    except RecursionError as e:
        raise E.FormatError(code="6005") from e
    context = EvalContext(inp.read_boolean(), len(expr))
    # Only expressions that evaluated successfully are ever saved
    logger.debug("Recomputing saved subexpression %d (%d tokens)", index, len(expr))
    try:
        result = MathEngine.evaluate_prefix(expr.tokens, context)
    except E.MathError as e:
        raise E.FormatError(f"Saved subexpression could not be evaluated: {e.message}",
                            code="6002") from e
    token = PreEvaluated(result.value, result.rational, expr, context, inp.read_utf())
    session.register(index, token)
    return token


def read_token(inp, session):
    tag = inp.read_byte()
    if tag == TokenKind.LITERAL:
        whole = inp.read_utf()
        saw_decimal = inp.read_boolean()
        fraction = inp.read_utf()
        if not (whole.isdigit() or whole == "") or not (fraction.isdigit() or fraction == ""):
            raise E.FormatError("Invalid number in save data", code="6000")
        return Literal(whole, saw_decimal, fraction)
    if tag == TokenKind.OPERATOR:
        key_id = inp.read_int()
        try:
            return Operator(Key(key_id))
        except ValueError as e:
            raise E.FormatError(f"Unknown operator id {key_id}", code="6003") from e
    if tag == TokenKind.PRE_EVAL:
        return _read_pre_eval(inp, session)
    raise E.FormatError(f"Bad save file format: tag {tag}", code="6000")


def read_expr(inp, session):
    size = inp.read_int()
    if size < 0:
        raise E.FormatError("Negative token count", code="6000")
    return Expression([read_token(inp, session) for _ in range(size)])


# -----------------------------
# Convenience
# -----------------------------

def dumps(expr):
    buffer = io.BytesIO()
    write_expr(expr, DataWriter(buffer), EncodeSession())
    return buffer.getvalue()


def loads(data):
    return read_expr(DataReader(io.BytesIO(data)), DecodeSession())
