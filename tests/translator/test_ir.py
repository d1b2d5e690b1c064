"""Tests for IR models and method name encoding."""

import pytest
from pydantic import TypeAdapter, ValidationError

from src.translator.ir import (
    BareCall,
    Command,
    ConditionalStmt,
    Instruction,
    LiteralText,
    MethodCall,
    StringLiteral,
    decode_method_name,
    encode_method_name,
)


class TestMethodNames:
    """Tests for predicate and bang method name encoding."""

    def test_predicate(self):
        assert encode_method_name("with?") == "with__q"
        assert decode_method_name("with__q") == "with?"

    def test_bang(self):
        assert encode_method_name("gsub!") == "gsub__b"
        assert decode_method_name("gsub__b") == "gsub!"

    def test_plain_name_unchanged(self):
        assert encode_method_name("install") == "install"
        assert decode_method_name("install") == "install"

    def test_plain_name_with_suffix_is_escaped(self):
        """Names that already look encoded decode back to themselves."""
        assert encode_method_name("foo__q") == "foo__q__e"
        assert decode_method_name("foo__q__e") == "foo__q"
        assert encode_method_name("foo__b") == "foo__b__e"
        assert decode_method_name("foo__b__e") == "foo__b"
        assert encode_method_name("foo__e") == "foo__e__e"
        assert decode_method_name("foo__e__e") == "foo__e"

    def test_predicate_with_suffix_in_stem(self):
        assert encode_method_name("foo__q?") == "foo__q__q"
        assert decode_method_name("foo__q__q") == "foo__q?"
        assert decode_method_name(encode_method_name("foo__e!")) == "foo__e!"


class TestSerialization:
    """Tests for JSON round trips through the discriminated unions."""

    def test_instruction_json_round_trip(self):
        """Variants are restored from their ``type`` tags."""
        adapter = TypeAdapter(list[Instruction])
        instructions = [
            ConditionalStmt(
                kind="if",
                cond=MethodCall(
                    receiver=BareCall(name="build"),
                    method="with__q",
                    args=[StringLiteral(parts=[LiteralText(value="docs")])],
                ),
                then_branch=[Command(name="install", receiver=BareCall(name="doc"))],
            )
        ]
        data = adapter.dump_python(instructions, mode="json")
        assert data[0]["type"] == "conditional"
        assert data[0]["cond"]["receiver"]["type"] == "bare_call"
        assert adapter.validate_python(data) == instructions

    def test_unknown_tag_rejected(self):
        adapter = TypeAdapter(Instruction)
        with pytest.raises(ValidationError):
            adapter.validate_python({"type": "loop", "body": []})


def test_models_are_frozen():
    command = Command(name="system")
    with pytest.raises(ValidationError):
        command.name = "exec"
