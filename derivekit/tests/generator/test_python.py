"""End-to-end tests executing generated modules."""

import dataclasses
import os

import pytest

from derivekit.generator import DirectiveError, OrderingError, RenderOptions, generate, load
from derivekit.runtime import CapabilityError

FILE_DIR = os.path.dirname(os.path.realpath(__file__))


@pytest.fixture
def shapes():
    with open(f"{FILE_DIR}/shapes.dk", encoding="utf-8") as f:
        return load(f.read())


def describe_point():
    def constructs_with_defaults(expect, shapes):
        Point = shapes["Point"]
        expect(repr(Point(x=3))) == "Point(x=3, y=0)"
        expect(repr(Point(3, 4))) == "Point(x=3, y=4)"

    def exposes_match_args(expect, shapes):
        Point = shapes["Point"]
        expect(Point.__match_args__) == ("x", "y")

        match Point(1, 2):
            case Point(a, b):
                expect((a, b)) == (1, 2)
            case _:
                pytest.fail("pattern did not match")

    def exposes_read_only_attributes(expect, shapes):
        p = shapes["Point"](1, 2)
        expect(p.x) == 1
        with pytest.raises(AttributeError):
            p.x = 5

    def compares_and_hashes(expect, shapes):
        Point = shapes["Point"]
        expect(Point(1, 2) == Point(1, 2)) == True
        expect(Point(1, 2) != Point(2, 1)) == True
        expect(Point(1, 2) == (1, 2)) == False
        expect(hash(Point(1, 2))) == hash(Point(1, 2))
        expect(len({Point(1, 2), Point(1, 2), Point(0, 0)})) == 2

    def requires_x(expect, shapes):
        with pytest.raises(TypeError):
            shapes["Point"]()

    def is_exported(expect, shapes):
        expect("Point" in shapes["__all__"]) == True


def describe_version():
    def orders_lexicographically(expect, shapes):
        Version = shapes["Version"]
        expect(Version(1, 2) < Version(1, 3)) == True
        expect(Version(1, 2, 1) > Version(1, 2)) == True
        expect(Version(1, 2) <= Version(1, 2, 0)) == True
        expect(Version(2, 0) >= Version(1, 9, 9)) == True
        expect(sorted([Version(2, 0), Version(1, 1), Version(1, 0, 5)])) == [
            Version(1, 0, 5),
            Version(1, 1),
            Version(2, 0),
        ]

    def iterates_forward_and_backward(expect, shapes):
        v = shapes["Version"](1, 2, 3)
        expect(list(v)) == [1, 2, 3]
        expect(list(reversed(v))) == [3, 2, 1]
        expect(len(v)) == 3

    def iterators_are_independent(expect, shapes):
        v = shapes["Version"](1, 2, 3)
        first = iter(v)
        expect(next(first)) == 1
        expect(list(iter(v))) == [1, 2, 3]
        expect(next(first)) == 2

    def length_does_not_depend_on_values(expect, shapes):
        Version = shapes["Version"]
        expect(len(Version(0, 0))) == len(Version(10, 20, 30))

    def uses_qualified_name_for_str(expect, shapes):
        expect(str(shapes["Version"](1, 2))) == "Version(major=1, minor=2, patch=0)"

    def writes_through_setters(expect, shapes):
        v = shapes["Version"](1, 2)
        v.patch = 7
        expect(list(v)) == [1, 2, 7]

    def is_unhashable_without_hash(expect, shapes):
        with pytest.raises(TypeError):
            hash(shapes["Version"](1, 2))


def describe_settings():
    def accepts_camel_case_arguments(expect, shapes):
        Settings = shapes["Settings"]
        s = Settings(hostName="example.com", portNumber=443)
        expect(repr(s)) == (
            "Settings(host_name='example.com', port_number=443, allowed_hosts=[])"
        )
        expect(s.host_name) == "example.com"

    def rejects_attribute_names_as_arguments(expect, shapes):
        with pytest.raises(TypeError):
            shapes["Settings"](host_name="example.com")

    def binds_every_exposed_name(expect, shapes):
        expect(shapes["ServerSettings"]) == shapes["Settings"]
        expect(shapes["Settings"].__name__) == "Settings"
        expect(sorted(n for n in shapes["__all__"] if "Settings" in n)) == [
            "ServerSettings",
            "Settings",
        ]

    def evaluates_expression_defaults_per_call(expect, shapes):
        Settings = shapes["Settings"]
        a = Settings(hostName="a")
        b = Settings(hostName="b")
        a.allowed_hosts.append("x")
        expect(b.allowed_hosts) == []

    def works_with_dataclasses(expect, shapes):
        Settings = shapes["Settings"]
        s = Settings(hostName="h")
        expect(dataclasses.is_dataclass(s)) == True
        expect([f.name for f in dataclasses.fields(s)]) == [
            "host_name",
            "port_number",
            "allowed_hosts",
        ]
        expect(dataclasses.asdict(s)) == {
            "host_name": "h",
            "port_number": 8080,
            "allowed_hosts": [],
        }
        expect(dataclasses.fields(Settings)[2].default_factory()) == []

    def exposes_annotations(expect, shapes):
        expect(shapes["Settings"].__annotations__) == {
            "host_name": "str",
            "port_number": "int",
            "allowed_hosts": "list[str]",
        }

    def provides_namedtuple_helpers(expect, shapes):
        Settings = shapes["Settings"]
        s = Settings(hostName="h", portNumber=1)
        expect(Settings._fields) == ("host_name", "port_number", "allowed_hosts")
        expect(Settings._field_defaults) == {"port_number": 8080, "allowed_hosts": []}
        expect(s._asdict()) == {"host_name": "h", "port_number": 1, "allowed_hosts": []}

        changed = s._replace(port_number=2)
        expect(changed.port_number) == 2
        expect(s.port_number) == 1
        expect(changed.host_name) == "h"

        made = Settings._make(["m", 3, ["a"]])
        expect(made._asdict()) == {"host_name": "m", "port_number": 3, "allowed_hosts": ["a"]}

    def rejects_unknown_replacements(expect, shapes):
        s = shapes["Settings"](hostName="h")
        with pytest.raises(TypeError) as e:
            s._replace(cache={})
        expect(str(e.value)) == "Got unexpected field names: ['cache']"

    def rejects_wrong_arity_in_make(expect, shapes):
        with pytest.raises(TypeError) as e:
            shapes["Settings"]._make(["m"])
        expect(str(e.value)) == "Expected 3 arguments, got 1"


def describe_pair():
    def names_positional_fields(expect, shapes):
        Pair = shapes["Pair"]
        p = Pair(1, "a")
        expect(repr(p)) == "Pair(_0=1, _1='a')"
        expect((p._0, p._1)) == (1, "a")
        expect(Pair.__match_args__) == ("_0", "_1")
        expect(len(p)) == 2
        expect(list(p)) == [1, "a"]


def describe_argument_casing():
    def last_convention_governs_arguments(expect, define):
        ns = define(
            """
            @derive(init, repr)
            @expose(get_all, name="Options")
            @expose(rename_all="camelCase")
            record Options {
                max_size: int
                retry_count: int
            }
            """
        )
        o = ns["Options"](maxSize=1, retryCount=2)
        expect(repr(o)) == "Options(max_size=1, retry_count=2)"
        expect(o.max_size) == 1

    def first_convention_governs_attributes(expect, define):
        ns = define(
            """
            @derive(init, repr, match_args)
            @expose(get_all, rename_all="camelCase")
            @expose(name="Options")
            record Options {
                max_size: int
                retry_count: int
            }
            """
        )
        o = ns["Options"](max_size=1, retry_count=2)
        expect(repr(o)) == "Options(maxSize=1, retryCount=2)"
        expect(o.maxSize) == 1
        expect(ns["Options"].__match_args__) == ("maxSize", "retryCount")


def describe_records():
    def round_trips_representation(expect, define):
        ns = define(
            """
            @derive(init, repr, eq)
            @expose(get_all)
            record Item(Eq) {
                name: str
                tags: list[str]
                count: int | None
            }
            """
        )
        Item = ns["Item"]
        item = Item("a", ["b"], None)
        expect(eval(repr(item), {"Item": Item})) == item

    def accepts_boolean_defaults(expect, define):
        ns = define(
            """
            @derive(init, repr, fields, field_defaults)
            @expose(get_all)
            record Flag {
                @derive(default=true)
                on: bool
                @derive(default=false)
                strict: bool
            }
            """
        )
        Flag = ns["Flag"]
        expect(repr(Flag())) == "Flag(on=True, strict=False)"
        expect(Flag._field_defaults) == {"on": True, "strict": False}
        expect(dataclasses.fields(Flag)[0].default) == True

    def implies_none_for_union_with_none(expect, define):
        ns = define(
            """
            @derive(init, repr)
            @expose(get_all)
            record Maybe {
                a: Union[int, None]
                b: typing.Union[str, None]
            }
            """
        )
        expect(repr(ns["Maybe"]())) == "Maybe(a=None, b=None)"

    def shows_hidden_fields_included_in_repr(expect, define):
        ns = define(
            """
            @derive(init, repr)
            record Secret {
                @derive(repr=true)
                token: str
                salt: str
            }
            """
        )
        secret = ns["Secret"]("abc", "xyz")
        expect(repr(secret)) == "Secret(token='abc')"
        with pytest.raises(AttributeError):
            secret.token

    def guards_recursive_repr(expect, define):
        ns = define(
            """
            @derive(init, repr)
            @expose(get_all)
            record Node { children: list }
            """
        )
        node = ns["Node"]([])
        node.children.append(node)
        expect(repr(node)) == "Node(children=[...])"

    def keeps_fields_out_of_init(expect, define):
        ns = define(
            """
            @derive(init, repr)
            @expose(get_all)
            record Cache {
                name: str
                @derive(init=false)
                entries: dict[str, int]
                @derive(init=false, default=3)
                limit: int
            }
            """
        )
        c = ns["Cache"]("c")
        expect(repr(c)) == "Cache(name='c', entries={}, limit=3)"

    def accepts_keyword_only_arguments(expect, define):
        ns = define(
            """
            @derive(init, repr)
            @expose(get_all)
            record Job {
                name: str
                @derive(default=1)
                priority: int
                @derive(kw_only)
                owner: str
            }
            """
        )
        Job = ns["Job"]
        expect(repr(Job("a", owner="me"))) == "Job(name='a', priority=1, owner='me')"
        with pytest.raises(TypeError):
            Job("a", 1, "me")

    def uses_richcmp_dispatch(expect, define):
        ns = define(
            """
            @derive(init, richcmp)
            record Money(Eq, Ord) {
                cents: int
            }
            """
        )
        Money = ns["Money"]
        expect(Money(1) < Money(2)) == True
        expect(Money(2) >= Money(2)) == True
        expect(Money(1) == Money(1)) == True
        expect(Money(1) != Money(1)) == False
        expect(Money(1) == 1) == False
        with pytest.raises(TypeError):
            hash(Money(1))

    def sets_module(expect, define):
        ns = define(
            """
            @derive(init)
            @expose(module="geometry", name="Vec")
            record Vector { x: int }
            """
        )
        expect(ns["Vec"].__module__) == "geometry"
        expect("Vector" in ns) == False

    def handles_records_without_fields(expect, define):
        ns = define(
            """
            @derive(init, repr, iter, len, match_args, eq, hash)
            record Unit(Eq, Hash) {}
            """
        )
        Unit = ns["Unit"]
        expect(repr(Unit())) == "Unit()"
        expect(list(Unit())) == []
        expect(len(Unit())) == 0
        expect(Unit.__match_args__) == ()
        expect(Unit() == Unit()) == True
        expect(hash(Unit())) == hash(Unit())

    def uses_user_capabilities(expect):
        class CaseInsensitive:
            __slots__ = ()

            def __structural_eq__(self, other):
                return self.text.lower() == other.text.lower()

        ns = load(
            """
            @derive(init, eq)
            @expose(get_all)
            record Word(CaseInsensitive) {
                text: str
            }
            """,
            namespace={"CaseInsensitive": CaseInsensitive},
        )
        Word = ns["Word"]
        expect(Word("Hello") == Word("hello")) == True
        expect(Word("Hello") != Word("world")) == True


def describe_errors():
    def reports_missing_capabilities(expect):
        with pytest.raises(CapabilityError) as e:
            load("@derive(init, eq) record R { a: int }")
        expect("__structural_eq__" in str(e.value)) == True

    def rejects_private_constructor_arguments(expect):
        with pytest.raises(DirectiveError):
            generate("@derive(init) record D { __x: int }")

    def renames_private_constructor_arguments(expect):
        ns = load(
            '@derive(init, repr) @expose(get_all) record D { @derive(arg_name="x") __x: int }'
        )
        expect(repr(ns["D"](x=1))) == "D(__x=1)"

    def rejects_accessors_shadowing_storage(expect):
        with pytest.raises(DirectiveError):
            generate('record R { @expose(get, name="_dk_y") x: int\n y: int }')

    def reports_ordering_errors_at_generation_time(expect):
        with pytest.raises(OrderingError):
            generate(
                """
                @derive(init)
                record R {
                    a: int
                    @derive(default=0)
                    b: int
                    c: int
                }
                """
            )

    def keeps_going_past_failing_records(expect):
        source, errors = generate(
            """
            @derive(init)
            record Bad {
                @derive(default=0)
                a: int
                b: int
            }

            @derive(init)
            record Good { a: int }
            """,
            RenderOptions(keep_going=True),
        )
        expect(len(errors)) == 1
        expect(errors[0].record) == "Bad"
        expect("class Good(" in source) == True
        expect("class Bad(" in source) == False

    def imports_the_configured_runtime(expect):
        source, _ = generate(
            "record R { a: int }", RenderOptions(runtime_import="myapp.records_runtime")
        )
        expect("import myapp.records_runtime as _rt" in source) == True
