"""Tests for the field catalogue."""

import pytest

from derivekit.generator import Visibility, build_descriptor, parse
from derivekit.generator.catalogue import DefaultSource
from derivekit.generator.errors import DirectiveError
from derivekit.generator.naming import NameContext, NamingConvention
from derivekit.generator.operations import Operation


def descriptor(text):
    return build_descriptor(parse(text)[0])


def describe_build_descriptor():
    def keeps_declaration_order(expect):
        record = descriptor("record R { c: int\n a: int\n b: int }")
        expect([f.identifier for f in record.fields]) == ["c", "a", "b"]
        expect([f.position for f in record.fields]) == [0, 1, 2]

    def combines_type_and_field_visibility(expect):
        record = descriptor(
            """
            @expose(get_all)
            record R {
                a: int
                @expose(set)
                b: int
            }
        """
        )
        expect([f.visibility for f in record.fields]) == [
            Visibility.READABLE,
            Visibility.READ_WRITE,
        ]

    def defaults_to_no_visibility(expect):
        record = descriptor("record R { a: int\n @expose(set) b: int }")
        expect([f.visibility for f in record.fields]) == [Visibility.NONE, Visibility.WRITABLE]

    def names_storage(expect):
        record = descriptor("record R { int\n label: str }")
        expect([f.storage for f in record.fields]) == ["_dk_0", "_dk_label"]

    def classifies_defaults(expect):
        record = descriptor(
            """
            record R {
                a: int
                @derive(default=1)
                b: int
                @derive(default=`[]`)
                c: list
            }
        """
        )
        expect([f.default_source for f in record.fields]) == [
            DefaultSource.ABSENT,
            DefaultSource.LITERAL,
            DefaultSource.EXPRESSION,
        ]
        expect(record.fields[2].default_text) == "([])"

    def spells_boolean_defaults_as_python(expect):
        record = descriptor(
            "record R { @derive(default=true) a: bool\n @derive(default=false) b: bool }"
        )
        expect([f.default_source for f in record.fields]) == [
            DefaultSource.LITERAL,
            DefaultSource.LITERAL,
        ]
        expect([f.default_text for f in record.fields]) == ["True", "False"]

    def propagates_kw_only(expect):
        record = descriptor("record R { a: int\n @derive(kw_only) b: int\n c: int }")
        expect([f.kw_only for f in record.fields]) == [False, True, True]

    def keeps_annotation_override(expect):
        record = descriptor(
            'record R { @derive(annotation="Sequence[int]") a: list[int]\n b: int }'
        )
        expect([f.annotation_text for f in record.fields]) == ["Sequence[int]", "int"]

    def keeps_renames(expect):
        record = descriptor('record R { @derive(match_name="m") a: int }')
        expect(record.fields[0].renames) == {NameContext.MATCH: "m"}

    def rejects_include_without_visibility(expect):
        with pytest.raises(DirectiveError) as e:
            descriptor("record R { @derive(iter=true) a: int }")
        expect(e.value.field) == "a"

    def rejects_readable_include_on_write_only_field(expect):
        with pytest.raises(DirectiveError):
            descriptor("record R { @expose(set) @derive(match_args=true) a: int }")

    def accepts_repr_include_on_write_only_field(expect):
        record = descriptor("record R { @expose(set) @derive(repr=true) a: int }")
        expect(record.fields[0].include) == {Operation.REPR}

    def accepts_repr_include_on_hidden_field(expect):
        record = descriptor("record R { @derive(repr=true) token: str }")
        expect(record.fields[0].visibility) == Visibility.NONE
        expect(record.fields[0].include) == {Operation.REPR}


def describe_type_descriptor():
    def exposes_first_name(expect):
        record = descriptor('@expose(name="Public")\n@expose(name="Alias") record R { a: int }')
        expect(record.exposed_name) == "Public"
        expect(record.aliases) == ["Public", "Alias"]

    def deduplicates_aliases(expect):
        record = descriptor(
            '@expose(name="R")\n@expose(rename_all="camelCase") record R { a: int }'
        )
        expect(record.aliases) == ["R"]

    def picks_conventions_by_context(expect):
        record = descriptor(
            '@expose(rename_all="kebab-case")\n@expose(rename_all="camelCase") record R { a: int }'
        )
        expect(record.convention_for(NameContext.ATTRIBUTE)) == NamingConvention.KEBAB_CASE
        expect(record.convention_for(NameContext.MATCH)) == NamingConvention.KEBAB_CASE
        expect(record.convention_for(NameContext.ARGUMENT)) == NamingConvention.CAMEL_CASE

    def keeps_capabilities(expect):
        record = descriptor("record R(Eq, mymod.Hash) { a: int }")
        expect(record.capabilities) == ("Eq", "mymod.Hash")
