"""Tests for the two-pass translator: symbol collection, inference and C generation."""

import pytest

from runml import (
    MAX_FUNCTIONS,
    MAX_PARAMETERS,
    MAX_VARIABLES,
    MLSyntaxError,
    NumType,
    Scope,
    Translator,
    translate_source,
)

ARITHMETIC = "a <- 5\nb <- 3\nc <- a * b + 2\nprint c\n"

SQUARE = "function square(x)\n\treturn x * x\n\nn <- 4\nresult <- square(n)\nprint result\n"


def _function_block(c_code: str, signature: str) -> str:
    start = c_code.index(signature + " {")
    return c_code[start : c_code.index("\n}\n", start) + 2]


# ============================================================
# globals and main
# ============================================================


def test_globals_declared_in_registration_order():
    c_code = translate_source(ARITHMETIC)
    assert "int a = 0;\nint b = 0;\nint c = 0;\n" in c_code


def test_main_assigns_known_globals():
    c_code = translate_source(ARITHMETIC)
    assert "    a = 5;\n" in c_code
    assert "    c = a * b + 2;\n" in c_code
    assert "int main(int argc, char *argv[]) {" in c_code
    assert c_code.endswith("    return 0;\n}\n")


def test_real_literal_makes_real_global():
    c_code = translate_source("x <- 2.5\ny <- 10/3\n")
    assert "double x = 0.0;" in c_code
    assert "int y = 0;" in c_code
    assert "y = 10 / 3;" in c_code


def test_print_uses_temporary_real_binding():
    c_code = translate_source("print 1 + 2\n")
    assert "double temp_value;" in c_code
    assert "temp_value = 1 + 2;" in c_code
    assert "if (fabs(temp_value - (int)temp_value) < 1e-6) {" in c_code
    assert 'printf("%d\\n", (int)temp_value);' in c_code
    assert 'printf("%.6f\\n", temp_value);' in c_code


def test_comments_and_blank_lines_are_skipped():
    c_code = translate_source("# note <- 3\n\nx <- 1\n  # indented note\nprint x\n")
    assert "note" not in c_code
    assert "int x = 0;" in c_code


def test_main_scope_declares_on_first_use():
    translator = Translator()
    scope = Scope("main")
    assert translator.translate_statement("y <- 2.5 * 2", scope) == ["double y = 2.5 * 2;"]
    assert translator.translate_statement("y <- 1", scope) == ["y = 1;"]
    assert scope.lookup("y").type is NumType.REAL


def test_return_in_main():
    assert "    return 3;\n" in translate_source("return 3\n")


def test_program_arguments_bound_from_argv():
    c_code = translate_source("print arg0 + arg1\n")
    assert "double arg0 = 0.0;\ndouble arg1 = 0.0;\n" in c_code
    assert "    if (argc > 1) {\n        arg0 = atof(argv[1]);\n    }\n" in c_code
    assert "arg1 = atof(argv[2]);" in c_code


def test_argument_assigned_at_top_level_is_not_redeclared():
    c_code = translate_source("arg0 <- 3\nprint arg0\n")
    assert c_code.count("arg0 = 0.0;") == 1
    assert "    arg0 = 3;\n" in c_code


def test_zero_padded_argument_name_is_a_plain_variable():
    translator = Translator()
    c_code = translator.translate("arg01 <- 2\nprint arg1 + arg01\n")
    assert [variable.name for _, variable in translator.arguments] == ["arg1"]
    assert "double arg1 = 0.0;\nint arg01 = 0;\n" in c_code
    assert "atof(argv[2])" in c_code


# ============================================================
# functions
# ============================================================


def test_square_example():
    c_code = translate_source(SQUARE)
    assert "double square(double x);\n" in c_code
    block = _function_block(c_code, "double square(double x)")
    assert "    return x * x;\n" in block
    assert "return 0;" not in block
    assert "    result = square(n);\n" in c_code


def test_prototypes_precede_definitions():
    c_code = translate_source("function f(x)\n\treturn g(x)\nfunction g(y)\n\treturn y\n")
    assert c_code.index("double g(double y);") < c_code.index("double f(double x) {")
    assert c_code.index("double g(double y) {") < c_code.index("int main(")


def test_bare_parameter_form():
    c_code = translate_source("function add a b\n\treturn a + b\n")
    assert "double add(double a, double b);" in c_code


def test_zero_parameter_function_defaults_to_real():
    c_code = translate_source("function hello\n\tprint 1\n\nhello()\n")
    block = _function_block(c_code, "double hello(void)")
    assert block.rstrip().endswith("return 0;\n}")
    assert "    hello();\n" in c_code


def test_call_site_infers_parameter_and_return_types():
    c_code = translate_source("function printsum(a, b)\n\tprint a + b\n\nprintsum(12, 6.5)\n")
    assert "int printsum(int a, double b);" in c_code
    block = _function_block(c_code, "int printsum(int a, double b)")
    assert "    return 0;\n" in block


def test_return_type_follows_first_parameter():
    c_code = translate_source("function scale(k, v)\n\treturn k * v\n\nscale(2.0, 3)\n")
    assert "double scale(double k, int v);" in c_code


def test_extra_call_arguments_ignored():
    c_code = translate_source("function one(a)\n\treturn a\n\none(1, 2.5, 3)\n")
    assert "int one(int a);" in c_code


def test_missing_call_arguments_default_to_real():
    c_code = translate_source("function pair(a, b)\n\treturn a\n\npair(1)\n")
    assert "int pair(int a, double b);" in c_code


def test_function_locals_and_parameters():
    source = "function f(x)\n\tx <- x + 1\n\ty <- x * 2\n\ty <- y + 1\n\treturn y\n\nprint f(3)\n"
    block = _function_block(translate_source(source), "double f(double x)")
    assert "    x = x + 1;\n" in block
    assert "    int y = x * 2;\n" in block
    assert "    y = y + 1;\n" in block


def test_function_body_assigns_known_global():
    source = "total <- 0\nfunction bump(n)\n\ttotal <- total + n\n\nbump(2)\nprint total\n"
    c_code = translate_source(source)
    block = _function_block(c_code, "int bump(int n)")
    assert "    total = total + n;\n" in block
    assert "int total" not in block


def test_function_locals_do_not_leak_between_functions():
    source = "function f(x)\n\tt <- x\n\treturn t\nfunction g(y)\n\tt <- y\n\treturn t\n"
    c_code = translate_source(source)
    assert "int t = x;" in c_code
    assert "int t = y;" in c_code


def test_function_body_lines_not_emitted_in_main():
    c_code = translate_source(SQUARE)
    main = c_code[c_code.index("int main(") :]
    assert "return x * x;" not in main


def test_statement_after_body_without_blank_line():
    c_code = translate_source("function f(x)\n\treturn x\nn <- 2\nprint f(n)\n")
    main = c_code[c_code.index("int main(") :]
    assert "    n = 2;\n" in main


def test_comment_inside_body_skipped():
    block = _function_block(translate_source("function f(x)\n\t# doubles x\n\treturn x * 2\n"), "double f(double x)")
    assert "doubles" not in block


# ============================================================
# errors
# ============================================================


@pytest.mark.parametrize(
    "source,message",
    [
        ("x <- (3 + 2\n", "Unbalanced parentheses in line: x <- \\(3 \\+ 2"),
        ("1abc <- 3\n", "Invalid variable name: 1abc"),
        ("averyverylongname <- 1\n", "Invalid variable name"),
        ("int <- 3\n", "Reserved word used as variable name: int"),
        ("x <-\n", "Invalid assignment"),
        ("hello world\n", "Unrecognized statement: hello world"),
        ("x <- 3 % 2\n", "Invalid character in expression: %"),
        ("print\n", "print requires an expression"),
        ("function f(x)\n\treturn\n", "return requires an expression"),
        ("function 9f(x)\n\treturn x\n", "Invalid function definition"),
        ("function f(x, 2y)\n\treturn x\n", "Invalid parameter in function: 2y"),
        ("function f(x, x)\n\treturn x\n", "Duplicate parameter in function: f"),
        ("function f(x\n\treturn x\n", "Unbalanced parentheses"),
        ("function f(x)\n\treturn (x\n", "Unbalanced parentheses in line: return \\(x"),
        ("function f(x)\n\treturn x\nfunction f(y)\n\treturn y\n", "Function already defined: f"),
        ("function f(x)\n\treturn x\n\nf <- 3\n", "Variable name conflicts with a function name: f"),
        ("f <- 3\nfunction f(x)\n\treturn x\n", "Function name conflicts with a variable name: f"),
        ("function f(x)\n\tf <- 3\n", "Variable name conflicts with a function name: f"),
        ("x <- 1\n\tprint x\n", "Invalid indentation outside of a function"),
        (
            "function f(x)\n\tg <- x\n\treturn g\nfunction g(y)\n\treturn y\n\nprint g(2)\n",
            "Function name conflicts with a variable name: g",
        ),
        ("function f(g)\n\treturn g\nfunction g(y)\n\treturn y\n", "Function name conflicts with a variable name: g"),
        ("function f(f)\n\treturn f\n", "Parameter name conflicts with a function name: f"),
    ],
)
def test_syntax_errors(source, message):
    with pytest.raises(MLSyntaxError, match=message):
        translate_source(source)


def test_two_tab_body_line():
    with pytest.raises(MLSyntaxError, match="Invalid indentation in function 'f'. Line has spaces or multiple tabs."):
        translate_source("function f(x)\n\t\treturn x\n")


def test_space_indented_body_line():
    with pytest.raises(MLSyntaxError, match="Invalid indentation in function 'f'"):
        translate_source("function f(x)\n    return x\n")


def test_body_split_by_blank_line():
    with pytest.raises(MLSyntaxError, match="Body lines must be contiguous"):
        translate_source("function f(x)\n\tprint x\n\n\treturn x\n")


def test_body_resumes_two_lines_later():
    with pytest.raises(MLSyntaxError, match="Invalid indentation in function 'f'"):
        translate_source("function f(x)\n\tprint x\n\nn <- 1\n\treturn x\n")


def test_adjacent_functions_are_allowed():
    c_code = translate_source("function f(x)\n\treturn x\nfunction g(y)\n\treturn y\n")
    assert "double f(double x);" in c_code
    assert "double g(double y);" in c_code


def test_global_capacity():
    ok = "".join(f"v{i} <- {i}\n" for i in range(MAX_VARIABLES))
    assert f"int v{MAX_VARIABLES - 1} = 0;" in translate_source(ok)
    with pytest.raises(MLSyntaxError, match="Too many variables defined"):
        translate_source(ok + f"v{MAX_VARIABLES} <- 1\n")


def test_reassignment_does_not_count_toward_capacity():
    source = "".join(f"v{i} <- {i}\n" for i in range(MAX_VARIABLES)) + "v0 <- 7\n"
    assert "    v0 = 7;\n" in translate_source(source)


def test_function_capacity():
    source = "".join(f"function f{i}\n\treturn 1\n" for i in range(MAX_FUNCTIONS + 1))
    with pytest.raises(MLSyntaxError, match="Too many functions defined"):
        translate_source(source)


def test_function_locals_fill_to_capacity():
    source = "function f(x)\n" + "".join(f"\tv{i} <- {i}\n" for i in range(MAX_VARIABLES))
    assert f"    int v{MAX_VARIABLES - 1} = {MAX_VARIABLES - 1};\n" in translate_source(source)


@pytest.mark.parametrize(
    "source,message",
    [
        (
            "function f(x)\n" + "".join(f"\tv{i} <- {i}\n" for i in range(MAX_VARIABLES + 1)),
            "Too many variables defined in function 'f' scope",
        ),
        (
            "function f(" + ", ".join(f"p{i}" for i in range(MAX_PARAMETERS + 1)) + ")\n\treturn p0\n",
            "Too many parameters in function: f",
        ),
    ],
)
def test_function_limits(source, message):
    with pytest.raises(MLSyntaxError, match=message):
        translate_source(source)


# ============================================================
# lifecycle
# ============================================================


def test_translation_is_idempotent():
    source = SQUARE + "function printsum(a, b)\n\tprint a + b\n\nprintsum(1, 2.5)\n"
    assert translate_source(source) == translate_source(source)


def test_translator_reuse_resets_tables():
    translator = Translator()
    first = translator.translate(ARITHMETIC)
    assert translator.translate(ARITHMETIC) == first
    assert [variable.name for variable in translator.globals] == ["a", "b", "c"]
