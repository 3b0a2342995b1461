"""
Tests for the configuration surface.

Scope
- ParserOptions validation, merging and equality.
- ApplicationOptions sanitizing, derived fields and per-command setting lookup.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from navarch import *
from navarch.utils import Unset


def _noop(context, options):
    return 0


class ParserOptionsTest(TestCase):
    """Partial parser toggles."""

    def testUnsetByDefault(self):
        options = ParserOptions()
        self.assertIs(options.ignore_unknown_options, Unset)
        self.assertIs(options.provide_help_command, Unset)

    def testRejectsNonBooleans(self):
        with self.assertRaises(TypeError):
            ParserOptions(ignore_unknown_options="yes")
        with self.assertRaises(TypeError):
            ParserOptions(provide_help_options=1)

    def testMergeFillsUnsetOnly(self):
        merged = ParserOptions(ignore_unknown_options=True).merge(
            ParserOptions(ignore_unknown_options=False, provide_help_command=False)
        )
        self.assertIs(merged.ignore_unknown_options, True)
        self.assertIs(merged.provide_help_command, False)
        self.assertIs(merged.provide_version_command, Unset)

    def testEquality(self):
        self.assertEqual(ParserOptions(), ParserOptions())
        self.assertEqual(ParserOptions(provide_help_command=False), ParserOptions(provide_help_command=False))
        self.assertNotEqual(ParserOptions(provide_help_command=False), ParserOptions())
        self.assertEqual(len({ParserOptions(), ParserOptions()}), 1)

    def testCannotSubclass(self):
        with self.assertRaises(TypeError):
            class Derived(ParserOptions):  # NOQA: F-841
                pass


class ApplicationOptionsTest(TestCase):
    """Host-populated application configuration."""

    def testDefaults(self):
        options = ApplicationOptions()
        self.assertIsNone(options.name)
        self.assertIsNone(options.version)
        self.assertIsNone(options.cliname)
        self.assertIsNone(options.copyright)
        self.assertIs(options.parser.ignore_unknown_options, False)
        self.assertIs(options.parser.ignore_additional_values, False)
        self.assertIs(options.parser.provide_help_command, True)
        self.assertIs(options.parser.provide_version_command, True)
        self.assertIs(options.parser.provide_help_options, True)
        self.assertIs(options.parser.provide_version_options, True)
        self.assertTrue(options.colorful)
        self.assertFalse(options.fancy)

    def testClinameDefaultsToName(self):
        self.assertEqual(ApplicationOptions("tool").cliname, "tool")
        self.assertEqual(ApplicationOptions("Tool", cliname="tl").cliname, "tl")

    def testStringsAreStripped(self):
        options = ApplicationOptions("  tool  ", " 1.0 ")
        self.assertEqual(options.name, "tool")
        self.assertEqual(options.version, "1.0")

    def testRejectsBadMetadata(self):
        with self.assertRaises(ValueError):
            ApplicationOptions("   ")
        with self.assertRaises(TypeError):
            ApplicationOptions(1)
        with self.assertRaises(TypeError):
            ApplicationOptions(year=True)
        with self.assertRaises(TypeError):
            ApplicationOptions(parser={"ignore_unknown_options": True})
        with self.assertRaises(TypeError):
            ApplicationOptions(styles=[])

    def testCopyright(self):
        self.assertEqual(ApplicationOptions(author="Ada", year=2024).copyright, "Copyright (C) 2024 Ada")
        self.assertEqual(ApplicationOptions(author="Ada").copyright, "Copyright (C) Ada")

    def testParserMergedWithDefaults(self):
        options = ApplicationOptions(parser=ParserOptions(provide_help_command=False))
        self.assertIs(options.parser.provide_help_command, False)
        self.assertIs(options.parser.provide_help_options, True)

    def testStylesAreReadOnly(self):
        options = ApplicationOptions(styles={"usage": "red"})
        self.assertEqual(options.styles["usage"], "red")
        with self.assertRaises(TypeError):
            options.styles["usage"] = "blue"

    def testLookupApplicationLevel(self):
        options = ApplicationOptions(parser=ParserOptions(ignore_unknown_options=True))
        self.assertIs(options.lookup("ignore_unknown_options"), True)
        self.assertIs(options.lookup("ignore_additional_values"), False)

    def testLookupRejectsUnknownSetting(self):
        with self.assertRaises(ValueError):
            ApplicationOptions().lookup("not_a_setting")

    def testLookupInheritsThroughAncestors(self):
        options = ApplicationOptions()
        registry = CommandRegistry(options)
        remote = registry.register(CommandDescriptor(
            "remote",
            executable=False,
            parser=ParserOptions(ignore_unknown_options=True),
        ))
        add = registry.register(CommandDescriptor("add", parent=remote.type), _noop)
        strict = registry.register(CommandDescriptor(
            "strict",
            parent=remote.type,
            parser=ParserOptions(ignore_unknown_options=False),
        ), _noop)
        self.assertIs(options.lookup("ignore_unknown_options", remote), True)
        self.assertIs(options.lookup("ignore_unknown_options", add), True)
        self.assertIs(options.lookup("ignore_unknown_options", strict), False)
        self.assertIs(options.lookup("ignore_additional_values", add), False)


if __name__ == "__main__":
    unittest.main()
