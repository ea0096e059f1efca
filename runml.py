import argparse
import enum
import os
import shutil
import string
import subprocess
import sys
import tempfile
import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

FUNCTION_KEYWORD = "function"
PRINT_KEYWORD = "print"
RETURN_KEYWORD = "return"
ASSIGNMENT_MARKER = "<-"
COMMENT_MARKER = "#"
BODY_INDENT = "\t"
ARGUMENT_PREFIX = "arg"

MAX_IDENTIFIER_LENGTH = 12
MAX_VARIABLES = 50
MAX_FUNCTIONS = 50
MAX_PARAMETERS = 50

EXPRESSION_SYMBOLS = frozenset("+-*/()., _")
CFLAGS = ["-std=c11", "-Wall", "-Werror"]

RESERVED_WORDS = frozenset(
    {
        FUNCTION_KEYWORD,
        PRINT_KEYWORD,
        RETURN_KEYWORD,
        "auto",
        "break",
        "case",
        "char",
        "const",
        "continue",
        "default",
        "do",
        "double",
        "else",
        "enum",
        "extern",
        "float",
        "for",
        "goto",
        "if",
        "inline",
        "int",
        "long",
        "register",
        "restrict",
        "short",
        "signed",
        "sizeof",
        "static",
        "struct",
        "switch",
        "typedef",
        "union",
        "unsigned",
        "void",
        "volatile",
        "while",
        "main",
        "argc",
        "argv",
        "temp_value",
        "printf",
        "fabs",
        "atof",
    }
)

_IDENTIFIER_START = frozenset(string.ascii_letters)
_IDENTIFIER_CHARS = frozenset(string.ascii_letters + string.digits + "_")


class LogKind(enum.Enum):
    INFO = "INFO"
    CODE = "CODE"


class ErrorKind(enum.Enum):
    SYNTAX = "SYNTAX"
    FILE = "FILE"


class MLError(Exception):
    kind = ErrorKind.SYNTAX


class MLSyntaxError(MLError):
    kind = ErrorKind.SYNTAX


class MLFileError(MLError):
    kind = ErrorKind.FILE


class Logger:
    def __init__(self, verbose: bool = False) -> None:
        self.verbose = verbose
        self.start = time.perf_counter()

    def log(self, kind: LogKind, message: str) -> None:
        if self.verbose:
            print(f"@ Debug [{kind.value}] : {message}")

    def info(self, message: str) -> None:
        self.log(LogKind.INFO, message)

    def code(self, message: str) -> None:
        self.log(LogKind.CODE, message)

    def line(self, lineno: int, text: str) -> None:
        self.code(f"Line {lineno} - {text}")

    def error(self, error: MLError) -> None:
        print(f"! Error [{error.kind.value}] : {error}", file=sys.stderr)

    def done(self, exit_code: int) -> None:
        duration = time.perf_counter() - self.start
        status = "run ok" if exit_code == 0 else "run failed"
        self.info(f"{status} ({duration:.2f}s), exit code {exit_code}")


class NumType(enum.Enum):
    UNKNOWN = "unknown"
    INT = "int"
    REAL = "double"

    @property
    def zero(self) -> str:
        return "0.0" if self is NumType.REAL else "0"


class LineKind(enum.Enum):
    BLANK = "blank"
    COMMENT = "comment"
    FUNCTION = "function"
    ASSIGNMENT = "assignment"
    PRINT = "print"
    RETURN = "return"
    CALL = "call"
    UNKNOWN = "unknown"


@dataclass
class SourceLine:
    lineno: int
    text: str

    @property
    def indented(self) -> bool:
        return self.text.startswith(BODY_INDENT)


class LineCursor:
    def __init__(self, source: str) -> None:
        self.lines: List[SourceLine] = [
            SourceLine(lineno=idx, text=raw) for idx, raw in enumerate(source.splitlines(), start=1)
        ]
        self.pos = 0

    def peek(self, offset: int = 0) -> Optional[SourceLine]:
        index = self.pos + offset
        if index >= len(self.lines):
            return None
        return self.lines[index]

    def advance(self) -> SourceLine:
        line = self.peek()
        if line is None:
            raise MLSyntaxError("unexpected end of file")
        self.pos += 1
        return line

    def rewind(self) -> None:
        self.pos = 0

    def __iter__(self) -> Iterator[SourceLine]:
        while self.peek() is not None:
            yield self.advance()


def _starts_with_keyword(text: str, keyword: str) -> bool:
    if not text.startswith(keyword):
        return False
    rest = text[len(keyword) :]
    return rest == "" or rest[0] in " \t"


def classify_line(text: str) -> LineKind:
    if not text.strip():
        return LineKind.BLANK
    if text.lstrip().startswith(COMMENT_MARKER):
        return LineKind.COMMENT
    if _starts_with_keyword(text, FUNCTION_KEYWORD):
        return LineKind.FUNCTION
    if ASSIGNMENT_MARKER in text:
        return LineKind.ASSIGNMENT
    if _starts_with_keyword(text, PRINT_KEYWORD):
        return LineKind.PRINT
    if _starts_with_keyword(text, RETURN_KEYWORD):
        return LineKind.RETURN
    if "(" in text and ")" in text:
        return LineKind.CALL
    return LineKind.UNKNOWN


def check_parentheses_balance(text: str) -> bool:
    depth = 0
    for ch in text:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def is_valid_identifier(name: str) -> bool:
    if not name or name[0] not in _IDENTIFIER_START:
        return False
    if len(name) > MAX_IDENTIFIER_LENGTH:
        return False
    return all(ch in _IDENTIFIER_CHARS for ch in name[1:])


def infer_type(expression: str) -> NumType:
    # Lexical only: "10/3" stays int even though C may divide it.
    return NumType.REAL if "." in expression else NumType.INT


def check_type_consistency(expected: NumType, expression: str) -> bool:
    return infer_type(expression) is expected


def split_arguments(text: str) -> List[str]:
    arguments: List[str] = []
    depth = 0
    current: List[str] = []
    for ch in text:
        if ch == "," and depth == 0:
            arguments.append("".join(current).strip())
            current = []
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        current.append(ch)
    arguments.append("".join(current).strip())
    return [arg for arg in arguments if arg]


def _words(text: str) -> Iterator[str]:
    word: List[str] = []
    for ch in text:
        if ch in _IDENTIFIER_CHARS:
            word.append(ch)
        elif word:
            yield "".join(word)
            word = []
    if word:
        yield "".join(word)


def _indent(lines: Iterable[str]) -> List[str]:
    return [f"    {line}" if line else line for line in lines]


@dataclass
class Variable:
    name: str
    type: NumType


class Scope:
    def __init__(self, name: str, capacity: int = MAX_VARIABLES, parameters: Iterable[Variable] = ()) -> None:
        self.name = name
        self.capacity = capacity
        self.parameters: Dict[str, Variable] = {param.name: param for param in parameters}
        self.variables: Dict[str, Variable] = {}

    def lookup(self, name: str) -> Optional[Variable]:
        if name in self.parameters:
            return self.parameters[name]
        return self.variables.get(name)

    def declare(self, name: str, var_type: NumType) -> Variable:
        if len(self.variables) >= self.capacity:
            raise MLSyntaxError(f"Too many variables defined in {self.name} scope (limit {self.capacity}): {name}")
        variable = Variable(name=name, type=var_type)
        self.variables[name] = variable
        return variable

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None

    def __iter__(self) -> Iterator[Variable]:
        return iter(self.variables.values())


@dataclass
class Function:
    name: str
    parameters: List[Variable]
    return_type: NumType = NumType.UNKNOWN
    body: List[str] = field(default_factory=list)
    has_return: bool = False
    scope: Scope = field(init=False)

    def __post_init__(self) -> None:
        self.scope = Scope(f"function '{self.name}'", MAX_VARIABLES, self.parameters)

    def signature(self) -> str:
        params = ", ".join(f"{param.type.value} {param.name}" for param in self.parameters) or "void"
        return f"{self.return_type.value} {self.name}({params})"


class ExpressionTranslator:
    def __init__(self, logger: Logger) -> None:
        self.logger = logger

    def translate(self, expression: str) -> str:
        self.validate(expression)
        return self._term(expression.strip())

    def validate(self, expression: str) -> None:
        if not expression.strip():
            raise MLSyntaxError("Missing expression")
        depth = 0
        for ch in expression:
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth < 0:
                    raise MLSyntaxError(f"Unmatched closing parenthesis in expression: {expression}")
            if not (ch.isascii() and ch.isalnum()) and ch not in EXPRESSION_SYMBOLS:
                raise MLSyntaxError(f"Invalid character in expression: {ch}")
        if depth != 0:
            raise MLSyntaxError(f"Unmatched opening parenthesis in expression: {expression}")

    def _term(self, expression: str) -> str:
        # Split at the first * or /; + and - ride along inside the factor text.
        for index, ch in enumerate(expression):
            if ch in "*/":
                left = expression[:index].strip()
                right = expression[index + 1 :].strip()
                self.logger.code(f"Term - Left term: {left}, Operator: {ch}, Right term: {right}")
                return f"{self._term(left)} {ch} {self._term(right)}"
        self.logger.code(f"Factor - {expression}")
        return expression


class Translator:
    def __init__(self, logger: Optional[Logger] = None) -> None:
        self.logger = logger or Logger()
        self.expressions = ExpressionTranslator(self.logger)
        self._reset()

    def _reset(self) -> None:
        self.globals = Scope("global", MAX_VARIABLES)
        self.functions: Dict[str, Function] = {}
        self.arguments: List[Tuple[int, Variable]] = []

    def translate(self, source: str) -> str:
        self._reset()
        cursor = LineCursor(source)
        self.first_pass(cursor)
        cursor.rewind()
        return self.second_pass(cursor)

    # --- pass 1 ---

    def first_pass(self, cursor: LineCursor) -> None:
        self.logger.info("Starting first pass to parse global variables and functions")
        self.collect_arguments(cursor)
        for line in cursor:
            kind = classify_line(line.text)
            if kind in (LineKind.BLANK, LineKind.COMMENT):
                continue
            if not check_parentheses_balance(line.text):
                raise MLSyntaxError(f"Unbalanced parentheses in line: {line.text}")
            if line.text[0] in " \t":
                raise MLSyntaxError(f"Invalid indentation outside of a function: {line.text}")
            if kind is LineKind.FUNCTION:
                self.store_function(line, cursor)
            elif kind is LineKind.ASSIGNMENT:
                self.store_variable(line.text, self.globals)

    def collect_arguments(self, cursor: LineCursor) -> None:
        found: Dict[int, str] = {}
        for line in cursor.lines:
            if classify_line(line.text) is LineKind.COMMENT:
                continue
            for word in _words(line.text):
                digits = word[len(ARGUMENT_PREFIX) :]
                if not (word.startswith(ARGUMENT_PREFIX) and digits.isdigit() and is_valid_identifier(word)):
                    continue
                if str(int(digits)) == digits:
                    found.setdefault(int(digits), word)
        for index in sorted(found):
            self.logger.code(f"Program argument - {found[index]}")
            self.arguments.append((index, self.globals.declare(found[index], NumType.REAL)))

    def store_function(self, header: SourceLine, cursor: LineCursor) -> None:
        if len(self.functions) >= MAX_FUNCTIONS:
            raise MLSyntaxError("Too many functions defined.")
        name, parameters = self._parse_function_header(header.text)
        function = Function(name=name, parameters=[Variable(name=param, type=NumType.UNKNOWN) for param in parameters])
        self.functions[name] = function
        self.logger.code(f"Function definition: {name}({', '.join(parameters)})")
        for line in self._function_body(function, cursor):
            text = line.text[len(BODY_INDENT) :]
            kind = classify_line(text)
            if kind is LineKind.BLANK:
                continue
            if kind is LineKind.COMMENT:
                self.logger.code(f"Comment - {text.strip()}")
                continue
            if not check_parentheses_balance(text):
                raise MLSyntaxError(f"Unbalanced parentheses in line: {text}")
            self.logger.line(line.lineno, text)
            if kind is LineKind.RETURN:
                function.has_return = True
            function.body.extend(self.translate_statement(text, function.scope))

    def _parse_function_header(self, text: str) -> Tuple[str, List[str]]:
        rest = text[len(FUNCTION_KEYWORD) :].strip()
        if "(" in rest:
            name, _, params_text = rest.partition("(")
            params_text = params_text.strip()
            if not params_text.endswith(")"):
                raise MLSyntaxError(f"Invalid function definition: {text}")
            params_text = params_text[:-1]
        else:
            parts = rest.split(None, 1)
            name = parts[0] if parts else ""
            params_text = parts[1] if len(parts) > 1 else ""
        name = name.strip()
        if not is_valid_identifier(name) or name in RESERVED_WORDS:
            raise MLSyntaxError(f"Invalid function definition: {text}")
        if name in self.functions:
            raise MLSyntaxError(f"Function already defined: {name}")
        if name in self.globals:
            raise MLSyntaxError(f"Function name conflicts with a variable name: {name}")
        if any(name in function.scope for function in self.functions.values()):
            raise MLSyntaxError(f"Function name conflicts with a variable name: {name}")
        parameters = params_text.replace(",", " ").split()
        if len(parameters) > MAX_PARAMETERS:
            raise MLSyntaxError(f"Too many parameters in function: {name}")
        for param in parameters:
            if not is_valid_identifier(param) or param in RESERVED_WORDS:
                raise MLSyntaxError(f"Invalid parameter in function: {param}")
            if param in self.functions or param == name:
                raise MLSyntaxError(f"Parameter name conflicts with a function name: {param}")
        if len(set(parameters)) != len(parameters):
            raise MLSyntaxError(f"Duplicate parameter in function: {name}")
        return name, parameters

    def _function_body(self, function: Function, cursor: LineCursor) -> Iterator[SourceLine]:
        while True:
            line = cursor.peek()
            if line is None:
                return
            if line.indented:
                rest = line.text[len(BODY_INDENT) :]
                if rest.strip() and rest[0] in " \t":
                    raise self._indentation_error(function)
                yield cursor.advance()
                continue
            if line.text[:1] == " " and classify_line(line.text) not in (LineKind.BLANK, LineKind.COMMENT):
                raise self._indentation_error(function)
            self._check_body_end(function, cursor)
            return

    def _check_body_end(self, function: Function, cursor: LineCursor) -> None:
        # Two-line lookahead past the first non-indented line; it is not consumed.
        boundary = cursor.peek()
        following = cursor.peek(1)
        after = cursor.peek(2)
        if boundary is None or classify_line(boundary.text) is LineKind.FUNCTION:
            return
        if following is None:
            return
        if following.indented:
            raise MLSyntaxError(f"Invalid indentation in function '{function.name}'. Body lines must be contiguous.")
        if classify_line(following.text) is LineKind.FUNCTION:
            return
        if after is not None and after.indented:
            raise MLSyntaxError(f"Invalid indentation in function '{function.name}'. Body lines must be contiguous.")

    def _indentation_error(self, function: Function) -> MLSyntaxError:
        return MLSyntaxError(
            f"Invalid indentation in function '{function.name}'. Line has spaces or multiple tabs."
        )

    def _split_assignment(self, text: str) -> Tuple[str, str]:
        target, _, expression = text.partition(ASSIGNMENT_MARKER)
        name = target.strip()
        expression = expression.strip()
        if not name or not expression:
            raise MLSyntaxError(f"Invalid assignment: {text}")
        return name, expression

    def _check_variable_name(self, name: str) -> None:
        if not is_valid_identifier(name):
            raise MLSyntaxError(f"Invalid variable name: {name}")
        if name in RESERVED_WORDS:
            raise MLSyntaxError(f"Reserved word used as variable name: {name}")
        if name in self.functions:
            raise MLSyntaxError(f"Variable name conflicts with a function name: {name}")

    def store_variable(self, text: str, scope: Scope) -> Tuple[Variable, bool]:
        name, expression = self._split_assignment(text)
        self._check_variable_name(name)
        existing = scope.lookup(name)
        if existing is not None:
            return existing, False
        var_type = infer_type(expression)
        if not check_type_consistency(var_type, expression):
            raise MLSyntaxError(
                f"Type mismatch for variable {name}: expected {var_type.value} but got {infer_type(expression).value}"
            )
        return scope.declare(name, var_type), True

    # --- statements ---

    def translate_statement(self, text: str, scope: Scope) -> List[str]:
        kind = classify_line(text)
        if kind is LineKind.ASSIGNMENT:
            return self.translate_assignment(text, scope)
        if kind is LineKind.PRINT:
            return self.translate_print(text[len(PRINT_KEYWORD) :].strip())
        if kind is LineKind.RETURN:
            expression = text[len(RETURN_KEYWORD) :].strip()
            if not expression:
                raise MLSyntaxError(f"return requires an expression: {text}")
            self.logger.code(f"Return - Expression: {expression}")
            return [f"return {self.expressions.translate(expression)};"]
        if kind is LineKind.CALL:
            return self.translate_call(text.strip())
        raise MLSyntaxError(f"Unrecognized statement: {text}")

    def translate_assignment(self, text: str, scope: Scope) -> List[str]:
        name, expression = self._split_assignment(text)
        self.logger.code(f"Assignment - Identifier: {name}, Expression: {expression}")
        target = scope.lookup(name)
        if target is None:
            target = self.globals.lookup(name)
        value = self.expressions.translate(expression)
        if target is None:
            variable, _ = self.store_variable(text, scope)
            return [f"{variable.type.value} {variable.name} = {value};"]
        return [f"{target.name} = {value};"]

    def translate_print(self, expression: str) -> List[str]:
        if not expression:
            raise MLSyntaxError("print requires an expression")
        self.logger.code(f"Print - Expression: {expression}")
        value = self.expressions.translate(expression)
        return [
            "{",
            "    double temp_value;",
            f"    temp_value = {value};",
            "    if (fabs(temp_value - (int)temp_value) < 1e-6) {",
            '        printf("%d\\n", (int)temp_value);',
            "    } else {",
            '        printf("%.6f\\n", temp_value);',
            "    }",
            "}",
        ]

    def translate_call(self, text: str) -> List[str]:
        self.expressions.validate(text)
        self.logger.code(f"Function Call - {text}")
        self.determine_parameter_types(text)
        return [f"{text};"]

    def determine_parameter_types(self, call: str) -> None:
        name, _, rest = call.partition("(")
        function = self.functions.get(name.strip())
        if function is None:
            self.logger.code(f"Call to undeclared function {name.strip()}, emitted unchanged")
            return
        arguments = split_arguments(rest[: rest.rfind(")")])
        for param, argument in zip(function.parameters, arguments):
            param.type = infer_type(argument)
        if function.parameters:
            function.return_type = function.parameters[0].type

    def update_function_prototype(self, function: Function) -> None:
        if not function.parameters or function.parameters[0].type is NumType.UNKNOWN:
            for param in function.parameters:
                param.type = NumType.REAL
            function.return_type = NumType.REAL
            return
        for param in function.parameters:
            if param.type is NumType.UNKNOWN:
                param.type = NumType.REAL

    # --- pass 2 ---

    def second_pass(self, cursor: LineCursor) -> str:
        self.logger.info("Starting second pass to generate C code")
        main_body = self.generate_main_code(cursor)
        lines: List[str] = [
            "#include <stdio.h>",
            "#include <stdlib.h>",
            "#include <math.h>",
            "",
        ]
        lines.extend(self.generate_global_variables())
        lines.extend(self.generate_functions())
        lines.append("int main(int argc, char *argv[]) {")
        lines.extend(_indent(self.generate_argument_bindings()))
        lines.extend(_indent(main_body))
        lines.append("    return 0;")
        lines.append("}")
        return "\n".join(lines) + "\n"

    def generate_global_variables(self) -> List[str]:
        lines = [f"{variable.type.value} {variable.name} = {variable.type.zero};" for variable in self.globals]
        if lines:
            lines.append("")
        return lines

    def generate_functions(self) -> List[str]:
        for function in self.functions.values():
            self.update_function_prototype(function)
        lines: List[str] = []
        for function in self.functions.values():
            self.logger.code(f"Generating prototype and code for function: {function.name}")
            lines.append(f"{function.signature()};")
        if lines:
            lines.append("")
        for function in self.functions.values():
            lines.append(f"{function.signature()} {{")
            lines.extend(_indent(function.body))
            if not function.has_return:
                lines.append("    return 0;")
            lines.append("}")
            lines.append("")
        return lines

    def generate_argument_bindings(self) -> List[str]:
        lines: List[str] = []
        for index, variable in self.arguments:
            lines.append(f"if (argc > {index + 1}) {{")
            lines.append(f"    {variable.name} = atof(argv[{index + 1}]);")
            lines.append("}")
        return lines

    def generate_main_code(self, cursor: LineCursor) -> List[str]:
        scope = Scope("main", MAX_VARIABLES)
        lines: List[str] = []
        for line in cursor:
            kind = classify_line(line.text)
            if kind is LineKind.FUNCTION:
                self._skip_function_body(cursor)
                continue
            if kind is LineKind.BLANK:
                continue
            if kind is LineKind.COMMENT:
                self.logger.code(f"Comment - {line.text}")
                continue
            self.logger.line(line.lineno, line.text)
            lines.extend(self.translate_statement(line.text, scope))
        return lines

    def _skip_function_body(self, cursor: LineCursor) -> None:
        while True:
            line = cursor.peek()
            if line is None or not line.indented:
                return
            cursor.advance()


def translate_source(source: str, logger: Optional[Logger] = None) -> str:
    return Translator(logger).translate(source)


def read_source(source_path: str, logger: Logger) -> str:
    try:
        with open(source_path, "r", encoding="utf-8") as handler:
            source = handler.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise MLFileError(f"Could not open file {source_path}") from exc
    logger.info(f"Opened file {source_path}")
    return source


def write_c_file(c_path: str, c_code: str, logger: Logger) -> None:
    try:
        with open(c_path, "w", encoding="utf-8") as handler:
            handler.write(c_code)
    except OSError as exc:
        raise MLFileError(f"Could not create C file {c_path}") from exc
    logger.info(f"Created C file: {c_path}")


def compile_program(c_path: str, binary_path: str, logger: Logger, cc: str = "cc") -> None:
    if shutil.which(cc) is None:
        raise MLFileError(f"{cc} is not installed or not on PATH")
    command = [cc, *CFLAGS, "-o", binary_path, c_path, "-lm"]
    logger.info(f"Compiling the C file with command: {' '.join(command)}")
    try:
        result = subprocess.run(command, capture_output=True, text=True, check=False)
    except OSError as exc:
        raise MLFileError(f"{cc} invocation failed") from exc
    if result.returncode != 0:
        details = result.stderr.strip()
        message = f"Compilation failed for {c_path}"
        raise MLFileError(f"{message}\n{details}" if details else message)


def execute_program(binary_path: str, arguments: List[str], logger: Logger) -> None:
    command = [binary_path, *arguments]
    logger.info(f"Executing the compiled program with command: {' '.join(command)}")
    sys.stdout.flush()
    try:
        result = subprocess.run(command, check=False)
    except OSError as exc:
        raise MLFileError(f"Execution failed for {binary_path}") from exc
    if result.returncode != 0:
        raise MLFileError(f"Execution failed for {binary_path} (exit status {result.returncode})")


def run_program(
    c_code: str,
    arguments: List[str],
    logger: Logger,
    cc: str = "cc",
    keep_c: Optional[str] = None,
) -> None:
    with tempfile.TemporaryDirectory(prefix="runml_") as workdir:
        stem = f"ml_{os.getpid()}"
        c_path = keep_c or os.path.join(workdir, f"{stem}.c")
        binary_path = os.path.join(workdir, stem)
        write_c_file(c_path, c_code, logger)
        compile_program(c_path, binary_path, logger, cc)
        execute_program(binary_path, arguments, logger)
        logger.info("Cleaning up temporary files")


def build_program(c_code: str, binary_path: str, logger: Logger, cc: str = "cc", keep_c: Optional[str] = None) -> None:
    with tempfile.TemporaryDirectory(prefix="runml_") as workdir:
        c_path = keep_c or os.path.join(workdir, "ml.c")
        write_c_file(c_path, c_code, logger)
        compile_program(c_path, binary_path, logger, cc)
    logger.info(f"-> {binary_path}")


def _number(value: str) -> str:
    try:
        float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"'{value}' is not a number") from exc
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="runml", description="Translate an ml program to C, compile it and run it")
    parser.add_argument("source", help="path to the ml source file")
    parser.add_argument(
        "arguments",
        nargs="*",
        type=_number,
        help="numeric arguments, available to the program as arg0, arg1, ...",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="print debug output")
    parser.add_argument(
        "--mode",
        choices=["c", "build", "run"],
        default="run",
        help="c: only write the C program, build: compile it, run: compile and execute (default)",
    )
    parser.add_argument("--out", help="path for the generated C source; stdout in c mode when omitted")
    parser.add_argument("--exe", default="ml.out", help="path for the executable in build mode")
    parser.add_argument("--cc", default=os.environ.get("CC", "cc"), help="C compiler to use (default: $CC or cc)")
    return parser


def main(argv: List[str]) -> int:
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)

    logger = Logger(verbose=args.verbose)
    logger.info("Verbose mode enabled")

    try:
        source = read_source(args.source, logger)
        c_code = translate_source(source, logger)
        logger.info(f"mode {args.mode}")
        if args.mode == "c":
            if args.out:
                write_c_file(args.out, c_code, logger)
            else:
                sys.stdout.write(c_code)
        elif args.mode == "build":
            build_program(c_code, args.exe, logger, cc=args.cc, keep_c=args.out)
        else:
            run_program(c_code, args.arguments, logger, cc=args.cc, keep_c=args.out)
    except MLError as exc:
        logger.error(exc)
        logger.done(exit_code=1)
        return 1
    except KeyboardInterrupt:
        logger.error(MLFileError("run cancelled"))
        logger.done(exit_code=1)
        return 1

    logger.done(exit_code=0)
    return 0


def cli() -> int:
    return main(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
