"""
Descriptor tests (options, values, commands and the @command provider).

Scope
- OptionDescriptor name parsing, field derivation, flags and type handling.
- ValueDescriptor display names and defaults.
- CommandDescriptor alias and field cross-validation.
- @command/describe metadata provider.
- Conversion helpers (booleans, enums, containers).

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API only.
"""
import copy
import enum
import unittest
from unittest import TestCase

from navarch import *


class Color(enum.Enum):
    RED = "r"
    GREEN = "g"


class TestOptionDescriptor(TestCase):
    """Named option specification."""

    def testNamesSplitIntoShortsAndLongs(self):
        option = OptionDescriptor("-t", "--target", "--goal")
        self.assertEqual(option.shorts, ("t",))
        self.assertEqual(option.longs, ("target", "goal"))
        self.assertEqual(option.name, "target")
        self.assertEqual(option.signature, "-t, --target, --goal")

    def testFieldDerivedFromFirstLong(self):
        self.assertEqual(OptionDescriptor("--dry-run").field, "dry_run")
        self.assertEqual(OptionDescriptor("--dry-run", field="dry").field, "dry")

    def testRequiresLongName(self):
        with self.assertRaises(ValueError):
            OptionDescriptor("-t")
        with self.assertRaises(TypeError):
            OptionDescriptor()

    def testRejectsMalformedNames(self):
        for name in ("target", "-1", "--_x", "---x", "-tt", "--a_b", ""):
            with self.subTest(name=name), self.assertRaises(ValueError):
                OptionDescriptor(name, "--ok")

    def testRejectsDuplicateNames(self):
        with self.assertRaises(ValueError):
            OptionDescriptor("--target", "--TARGET")
        with self.assertRaises(ValueError):
            OptionDescriptor("-t", "-t", "--target")

    def testUnicodeNames(self):
        option = OptionDescriptor("-é", "--café")
        self.assertEqual(option.shorts, ("é",))
        self.assertTrue(option.matches("CAFÉ"))

    def testMatchesIsCaseInsensitive(self):
        option = OptionDescriptor("--Target")
        self.assertTrue(option.matches("target"))
        self.assertTrue(option.matches("TARGET"))
        self.assertFalse(option.matches("t"))

    def testFlag(self):
        option = OptionDescriptor("-v", "--verbose", type=bool)
        self.assertTrue(option.flag)
        self.assertFalse(option.enumerable)
        self.assertIs(option.initial(), False)

    def testRequiredFlagRejected(self):
        with self.assertRaises(ValueError):
            OptionDescriptor("--verbose", type=bool, required=True)

    def testEnumerableTypes(self):
        for type, container, element in (
                (list[int], list, int),
                (tuple[int, ...], tuple, int),
                (set[str], set, str),
                (frozenset[str], frozenset, str),
                (list, list, str),
        ):
            with self.subTest(type=type):
                option = OptionDescriptor("--item", type=type)
                self.assertTrue(option.enumerable)
                self.assertIs(option.container, container)
                self.assertIs(option.element, element)
                self.assertFalse(option.flag)

    def testRejectsHeterogeneousTuple(self):
        with self.assertRaises(TypeError):
            OptionDescriptor("--pair", type=tuple[int, str])

    def testRejectsNestedContainer(self):
        with self.assertRaises(TypeError):
            OptionDescriptor("--matrix", type=list[list[int]])

    def testRejectsNonCallableType(self):
        with self.assertRaises(TypeError):
            OptionDescriptor("--x", type=3)

    def testEnumerableDefaultBecomesTuple(self):
        option = OptionDescriptor("--tag", type=list[str], default=["a"])
        self.assertEqual(option.default, ("a",))
        initial = option.initial()
        initial.append("b")
        self.assertEqual(option.initial(), ["a"])

    def testEnumerableDefaultMustBeIterable(self):
        with self.assertRaises(TypeError):
            OptionDescriptor("--tag", type=list[str], default="a")

    def testFinalizeMaterializesContainer(self):
        self.assertEqual(OptionDescriptor("--n", type=tuple[int, ...]).finalize([1, 2]), (1, 2))
        self.assertEqual(OptionDescriptor("--n", type=set[int]).finalize([1, 1]), {1})
        self.assertEqual(OptionDescriptor("--n", type=list[int]).finalize([1]), [1])

    def testConvert(self):
        self.assertEqual(OptionDescriptor("--n", type=int).convert("4"), 4)
        self.assertIs(OptionDescriptor("--c", type=Color).convert("red"), Color.RED)
        self.assertIs(OptionDescriptor("--c", type=Color).convert("g"), Color.GREEN)
        self.assertIs(OptionDescriptor("--b", type=bool).convert("Yes"), True)
        with self.assertRaises(ValueError):
            OptionDescriptor("--n", type=int).convert("four")
        with self.assertRaises(ValueError):
            OptionDescriptor("--c", type=Color).convert("blue")

    def testDescrValidation(self):
        self.assertIsNone(OptionDescriptor("--x").descr)
        self.assertEqual(OptionDescriptor("--x", descr="  Text ").descr, "Text")
        with self.assertRaises(ValueError):
            OptionDescriptor("--x", descr="   ")
        with self.assertRaises(TypeError):
            OptionDescriptor("--x", descr=None)

    def testReplaceKeepsMetadata(self):
        option = OptionDescriptor("-t", "--target", type=int, required=True, descr="Target")
        clone = copy.replace(option, field="goal")
        self.assertEqual(clone.field, "goal")
        self.assertEqual(clone.longs, ("target",))
        self.assertIs(clone.element, int)
        self.assertTrue(clone.required)
        self.assertEqual(option.field, "target")

    def testImmutable(self):
        option = OptionDescriptor("--x")
        with self.assertRaises(AttributeError):
            option.name = "y"

    def testRepr(self):
        self.assertTrue(repr(OptionDescriptor("--x")).startswith("option-descriptor(name='x'"))


class TestValueDescriptor(TestCase):
    """Positional value specification."""

    def testDisplaynameDefaultsToField(self):
        self.assertEqual(ValueDescriptor(field="source_file").displayname, "SOURCE-FILE")
        self.assertEqual(ValueDescriptor("SRC", field="source").displayname, "SRC")
        self.assertIsNone(ValueDescriptor().displayname)

    def testRejectsBadDisplayname(self):
        with self.assertRaises(ValueError):
            ValueDescriptor("  ")
        with self.assertRaises(ValueError):
            ValueDescriptor("TWO WORDS")

    def testDefaults(self):
        value = ValueDescriptor(field="x")
        self.assertEqual(value.order, 0)
        self.assertFalse(value.required)
        self.assertIsNone(value.initial())
        self.assertEqual(ValueDescriptor(field="x", default="d").initial(), "d")

    def testOrderMustBeInteger(self):
        with self.assertRaises(TypeError):
            ValueDescriptor(order="1")
        with self.assertRaises(TypeError):
            ValueDescriptor(order=True)


class TestCommandDescriptor(TestCase):
    """Static command metadata."""

    def testNameAndAliases(self):
        descriptor = CommandDescriptor("build", "b")
        self.assertEqual(descriptor.name, "build")
        self.assertEqual(descriptor.aliases, ("build", "b"))
        self.assertIsNone(descriptor.parent)
        self.assertEqual(descriptor.order, -1)
        self.assertTrue(descriptor.executable)
        self.assertFalse(descriptor.default)

    def testGeneratedTypeIsFreshNamespace(self):
        first = CommandDescriptor("remote-add")
        second = CommandDescriptor("remote-add")
        self.assertEqual(first.type.__name__, "RemoteAddOptions")
        self.assertTrue(issubclass(first.type, Namespace))
        self.assertIsNot(first.type, second.type)

    def testRejectsBadAliases(self):
        for aliases in (("",), ("two words",), ("tab\tname",), ("-x",), ("Build", "build")):
            with self.subTest(aliases=aliases), self.assertRaises(ValueError):
                CommandDescriptor(*aliases)
        with self.assertRaises(TypeError):
            CommandDescriptor()
        with self.assertRaises(TypeError):
            CommandDescriptor(1)

    def testRejectsSelfParent(self):
        class Options:
            pass

        with self.assertRaises(ValueError):
            CommandDescriptor("x", type=Options, parent=Options)
        with self.assertRaises(TypeError):
            CommandDescriptor("x", parent="Options")

    def testRejectsCollidingOptions(self):
        with self.assertRaises(ValueError):
            CommandDescriptor("x", options=[OptionDescriptor("-a", "--one"), OptionDescriptor("-a", "--two")])
        with self.assertRaises(ValueError):
            CommandDescriptor("x", options=[
                OptionDescriptor("--one"),
                OptionDescriptor("--ONE", field="other"),
            ])
        with self.assertRaises(ValueError):
            CommandDescriptor("x", options=[OptionDescriptor("--one"), OptionDescriptor("--two", field="one")])

    def testRejectsCollidingValueOrders(self):
        with self.assertRaises(ValueError):
            CommandDescriptor("x", values=[
                ValueDescriptor(field="a", order=0),
                ValueDescriptor(field="b", order=0),
            ])

    def testRejectsRequiredAfterOptional(self):
        with self.assertRaises(ValueError):
            CommandDescriptor("x", values=[
                ValueDescriptor(field="a", order=0),
                ValueDescriptor(field="b", order=1, required=True),
            ])

    def testRejectsEnumerableNotLast(self):
        with self.assertRaises(ValueError):
            CommandDescriptor("x", values=[
                ValueDescriptor(field="a", order=0, type=list[str]),
                ValueDescriptor(field="b", order=1),
            ])

    def testValuesSortedByOrder(self):
        descriptor = CommandDescriptor("x", values=[
            ValueDescriptor(field="b", order=5),
            ValueDescriptor(field="a", order=1, required=True),
        ])
        self.assertEqual([value.field for value in descriptor.values], ["a", "b"])
        self.assertEqual([field.field for field in descriptor.fields], ["a", "b"])

    def testValueWithoutFieldRejected(self):
        with self.assertRaises(TypeError):
            CommandDescriptor("x", values=[ValueDescriptor("X")])

    def testParserMustBeParserOptions(self):
        with self.assertRaises(TypeError):
            CommandDescriptor("x", parser={})
        self.assertEqual(
            CommandDescriptor("x", parser=ParserOptions(ignore_unknown_options=True)).parser,
            ParserOptions(ignore_unknown_options=True),
        )


class TestCommandDecorator(TestCase):
    """@command and describe()."""

    def testCollectsFields(self):
        @command("build", "b", descr="Build things")
        class Build:
            target = OptionDescriptor("-t", "--target-name", required=True)
            verbose = OptionDescriptor("-v", "--verbose", type=bool)
            source = ValueDescriptor(order=0, required=True)

        descriptor = Build.__descriptor__
        self.assertIs(descriptor.type, Build)
        self.assertEqual(descriptor.aliases, ("build", "b"))
        self.assertEqual(descriptor.descr, "Build things")
        self.assertEqual([option.field for option in descriptor.options], ["target", "verbose"])
        self.assertEqual(descriptor.values[0].field, "source")
        self.assertEqual(descriptor.values[0].displayname, "SOURCE")
        self.assertIs(describe(Build), descriptor)

    def testInheritedFields(self):
        class Common:
            verbose = OptionDescriptor("--verbose", type=bool)

        @command("child")
        class Child(Common):
            name = OptionDescriptor("--name")

        self.assertEqual([option.field for option in Child.__descriptor__.options], ["verbose", "name"])

    def testSubclassOfCommandIsNotACommand(self):
        @command("base")
        class Base:
            pass

        class Derived(Base):
            pass

        with self.assertRaises(TypeError):
            describe(Derived)

    def testCannotOverrideType(self):
        with self.assertRaises(TypeError):
            command("x", type=object)

    def testRejectsNonClass(self):
        with self.assertRaises(TypeError):
            command("x")(lambda: None)

    def testDescribeAcceptsProviders(self):
        descriptor = CommandDescriptor("x")

        class Provider:
            def __descriptor__(self):
                return descriptor

        class Holder:
            __descriptor__ = descriptor

        self.assertIs(describe(descriptor), descriptor)
        self.assertIs(describe(Provider()), descriptor)
        self.assertIs(describe(Holder()), descriptor)

    def testDescribeRejectsOthers(self):
        with self.assertRaises(TypeError):
            describe(object())

        class Broken:
            __descriptor__ = "nope"

        with self.assertRaises(TypeError):
            describe(Broken())


class TestParseBoolean(TestCase):

    def testLiterals(self):
        for raw in ("true", "YES", "on", "1"):
            self.assertIs(parse_boolean(raw), True)
        for raw in ("false", "No", "OFF", "0"):
            self.assertIs(parse_boolean(raw), False)
        with self.assertRaises(ValueError):
            parse_boolean("maybe")


if __name__ == "__main__":
    unittest.main()
