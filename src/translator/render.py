"""Line-oriented text rendering of install instructions.

A convenience projection for people reading translated recipes; the IR
models stay the canonical form. Example output:

    system("./configure", "--prefix=$prefix")
    system("make", "install")
    if build.with__q("docs"):
        doc.install("manual.html")
"""

from __future__ import annotations

import json

from . import ir

INDENT = "    "


def render_instructions(instructions: list[ir.Instruction], depth: int = 0) -> str:
    """Render instructions as text, one per line, nested bodies indented."""
    return "\n".join(_instruction_lines(instructions, depth))


def _instruction_lines(instructions: list[ir.Instruction], depth: int) -> list[str]:
    pad = INDENT * depth
    lines: list[str] = []
    for instruction in instructions:
        match instruction:
            case ir.Command():
                call = f"{instruction.name}({_render_args(instruction.args)})"
                if instruction.receiver is not None:
                    call = f"{_render_operand(instruction.receiver)}.{call}"
                lines.append(pad + call)
            case ir.ConditionalStmt():
                lines.append(f"{pad}{instruction.kind} {render_expression(instruction.cond)}:")
                lines.extend(_instruction_lines(instruction.then_branch, depth + 1))
                if instruction.else_branch is not None:
                    lines.append(f"{pad}else:")
                    lines.extend(_instruction_lines(instruction.else_branch, depth + 1))
            case ir.ExpressionStmt():
                lines.append(pad + render_expression(instruction.expr))
    return lines


def _render_args(args: list[ir.Expression]) -> str:
    return ", ".join(render_expression(arg) for arg in args)


def _render_operand(expr: ir.Expression) -> str:
    text = render_expression(expr)
    if isinstance(expr, (ir.Binary, ir.Assign)):
        return f"({text})"
    return text


def _render_part(part: ir.LiteralText | ir.EmbeddedExpr) -> str:
    if isinstance(part, ir.LiteralText):
        # json escaping, minus the surrounding quotes
        return json.dumps(part.value, ensure_ascii=False)[1:-1].replace("$", "\\$")
    if isinstance(part.expr, ir.VarRef):
        return f"${part.expr.name}"
    return "${" + render_expression(part.expr) + "}"


def render_expression(expr: ir.Expression) -> str:
    """Render a single expression."""
    match expr:
        case ir.StringLiteral():
            return '"' + "".join(_render_part(part) for part in expr.parts) + '"'
        case ir.VarRef():
            return expr.name
        case ir.BareCall():
            return f"{expr.name}({_render_args(expr.args)})" if expr.args else expr.name
        case ir.MethodCall():
            call = f"{_render_operand(expr.receiver)}.{expr.method}"
            return f"{call}({_render_args(expr.args)})" if expr.args else call
        case ir.Binary():
            return f"{_render_operand(expr.left)} {expr.op} {_render_operand(expr.right)}"
        case ir.Unary():
            separator = " " if expr.op == "not" else ""
            return f"{expr.op}{separator}{_render_operand(expr.operand)}"
        case ir.ArrayLiteral():
            return f"array({expr.length})"
        case ir.Index():
            return f"{_render_operand(expr.base)}[{render_expression(expr.subscript)}]"
        case ir.SymbolLiteral():
            return f":{expr.name}"
        case ir.IntLiteral():
            return str(expr.value)
        case ir.Assign():
            return f"{render_expression(expr.target)} = {render_expression(expr.value)}"
        case ir.Splat():
            return f"*{_render_operand(expr.value)}"
    raise TypeError(f"Cannot render {type(expr).__name__}")
