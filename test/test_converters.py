"""
Converter registry tests (registration rules, built-ins, fallbacks).

Scope
- Validate register/deregister semantics (no overwrite on duplicates).
- Validate built-in converters and invariant fallback parsing.
- Validate which types are considered convertible.

Conventions
- Test method names follow CamelCase per project convention.
- Converters are called with context=None and subject=None; none of the
  built-ins look at either.
"""
import unittest
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from unittest import TestCase

from herald import Converter, Converters, IntegerConverter


class Colour(Enum):
    RED = 1
    GREEN = 2


class Point:
    def __init__(self, x, y):
        self.x, self.y = x, y


class PointConverter:
    def from_tokens(self, tokens, context, subject, /):
        x, y = tokens
        return Point(int(x), int(y))

    def from_token(self, token, context, subject, /):
        return self.from_tokens(token.split(","), context, subject)


class TestConverterRegistry(TestCase):

    def testDefaultsAreRegistered(self):
        converters = Converters.defaults()
        for kind in (str, list[str], int, list[int]):
            self.assertIn(kind, converters)
        self.assertEqual(len(converters), 4)

    def testDuplicateRegistrationFailsWithoutReplacing(self):
        converters = Converters.defaults()
        original = converters.get(int)
        self.assertFalse(converters.register(int, IntegerConverter()))
        self.assertIs(converters.get(int), original)

    def testRegisterAndDeregister(self):
        converters = Converters()
        self.assertTrue(converters.register(Point, PointConverter()))
        self.assertTrue(converters.deregister(Point))
        self.assertFalse(converters.deregister(Point))
        self.assertNotIn(Point, converters)

    def testRegisterRejectsNonConverters(self):
        with self.assertRaises(TypeError):
            Converters().register(Point, object())

    def testConverterProtocolIsRuntimeCheckable(self):
        self.assertIsInstance(PointConverter(), Converter)


class TestConvertible(TestCase):

    def setUp(self):
        self.converters = Converters.defaults()

    def testBuiltinScalarsAreConvertible(self):
        for kind in (str, bool, int, float, complex, Decimal, Fraction, Colour):
            self.assertTrue(self.converters.convertible(kind), kind)

    def testArraysOfConvertibleElements(self):
        self.assertTrue(self.converters.convertible(list[float]))
        self.assertTrue(self.converters.convertible(tuple[Colour, ...]))

    def testOptionalTypes(self):
        self.assertTrue(self.converters.convertible(int | None))

    def testUnregisteredTypesAreNotConvertible(self):
        self.assertFalse(self.converters.convertible(Point))
        self.assertFalse(self.converters.convertible(list[Point]))
        self.assertFalse(self.converters.convertible(dict[str, int]))

    def testRegisteringMakesTypeConvertible(self):
        self.converters.register(Point, PointConverter())
        self.assertTrue(self.converters.convertible(Point))
        self.assertTrue(self.converters.convertible(list[Point]))


class TestConversion(TestCase):

    def setUp(self):
        self.converters = Converters.defaults()

    def convert(self, kind, *tokens):
        return self.converters.convert(kind, list(tokens), None, None)

    def testStringJoinsWithSingleSpace(self):
        self.assertEqual(self.convert(str, "hello", "big", "world"), "hello big world")

    def testStringArrayIsIdentity(self):
        self.assertEqual(self.convert(list[str], "a", "b"), ["a", "b"])

    def testIntegerIsInvariant(self):
        self.assertEqual(self.convert(int, "-42"), -42)
        for text in ("4_2", "٤٢", "", "1.5", "0x10"):
            with self.subTest(text=text), self.assertRaises(ValueError):
                self.convert(int, text)

    def testIntegerArray(self):
        self.assertEqual(self.convert(list[int], "1", "2", "3"), [1, 2, 3])
        with self.assertRaises(ValueError):
            self.convert(list[int], "1", "two")

    def testBooleans(self):
        self.assertIs(self.convert(bool, "TRUE"), True)
        self.assertIs(self.convert(bool, "false"), False)
        with self.assertRaises(ValueError):
            self.convert(bool, "yes")

    def testFloatAndDecimal(self):
        self.assertEqual(self.convert(float, "2.5"), 2.5)
        self.assertEqual(self.convert(Decimal, "0.10"), Decimal("0.10"))
        with self.assertRaises(ValueError):
            self.convert(float, "2,5")

    def testFraction(self):
        self.assertEqual(self.convert(Fraction, "3/4"), Fraction(3, 4))

    def testEnumByNameIgnoringCase(self):
        self.assertIs(self.convert(Colour, "green"), Colour.GREEN)
        with self.assertRaises(ValueError):
            self.convert(Colour, "blue")

    def testTupleOfEnums(self):
        self.assertEqual(self.convert(tuple[Colour, ...], "red", "GREEN"), (Colour.RED, Colour.GREEN))

    def testOptionalIsConvertedAsInner(self):
        self.assertEqual(self.convert(int | None, "7"), 7)

    def testArraysUseRegisteredElementConverter(self):
        self.converters.register(Point, PointConverter())
        points = self.convert(list[Point], "1,2", "3,4")
        self.assertEqual([(point.x, point.y) for point in points], [(1, 2), (3, 4)])

    def testUnconvertibleTypeRaises(self):
        with self.assertRaises(TypeError):
            self.convert(Point, "1", "2")


if __name__ == "__main__":
    unittest.main()
