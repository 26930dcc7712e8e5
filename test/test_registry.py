"""
Registry tests (registration outcomes and end-to-end dispatch).

Scope
- Validate Registration outcomes and the @registry.command decorator.
- Validate handle() results for every dispatch path: success, invalid input,
  unknown command, parsing failure, handler crash, multi-match warning.
- Validate per-call subject delivery and handler instance reuse.
- Validate the built-in help command.

Conventions
- Test method names follow CamelCase per project convention.
- Dispatch tests run on unittest.IsolatedAsyncioTestCase.
"""
import asyncio
import unittest
from unittest import IsolatedAsyncioTestCase, TestCase

from herald import (
    Argument,
    command,
    Command,
    CommandResult,
    Context,
    Help,
    Pattern,
    Registry,
    Status,
    InvalidParameterError,
    NoExecutorFoundError,
    ParsingFailedError,
)


class Echo(Command):
    """Repeat the given words."""

    received = []

    async def execute(self, context, words: list[str] = Argument(repetitions=0)) -> CommandResult:
        type(self).received.append(words)
        return CommandResult.success(" ".join(words))


class Ping(Command):
    async def execute(self, context) -> CommandResult:
        return CommandResult.success("pong")


class OtherPing(Command):
    async def execute(self, context) -> CommandResult:
        return CommandResult.success("other pong")


class Whoami(Command):
    async def execute(self, context: Context) -> CommandResult:
        await asyncio.sleep(0)
        return CommandResult.success(str(context.subject))


class Crash(Command):
    async def execute(self, context) -> CommandResult:
        raise RuntimeError("handler exploded")


class Sloppy(Command):
    async def execute(self, context):
        return "not a result"


class Add(Command):
    async def execute(self, context, left: int, right: int) -> CommandResult:
        return CommandResult.success(str(left + right))


class Identity(Command):
    instances = []

    async def execute(self, context) -> CommandResult:
        type(self).instances.append(self)
        return CommandResult.success()


class OtherIdentity(Command):
    instances = []

    async def execute(self, context) -> CommandResult:
        type(self).instances.append(self)
        return CommandResult.success()


class TestRegistration(TestCase):

    def testSuccessfulRegistration(self):
        registry = Registry()
        registration = registry.register(Ping, ["ping"])
        self.assertTrue(registration)
        self.assertIsNone(registration.fault)
        self.assertIn(Ping, registry)
        self.assertIn(registration.descriptor, registry)
        self.assertEqual(len(registry), 1)

    def testParameterOrderingViolationsAreRejected(self):
        registry = Registry()
        registry.register(Ping, ["ping"])

        class OptionalThenRequired(Command):
            async def execute(self, context, head: str = "", tail: str = Argument()):
                return CommandResult.success()

        class AfterRest(Command):
            async def execute(self, context, words=Argument(list[str], 0), tail: str = ""):
                return CommandResult.success()

        for definition in (OptionalThenRequired, AfterRest):
            with self.subTest(definition=definition.__name__):
                registration = registry.register(definition, ["bad"])
                self.assertFalse(registration)
                self.assertIsInstance(registration.fault, InvalidParameterError)
                self.assertIsNone(registration.descriptor)

        self.assertEqual(len(registry), 1)
        self.assertIsNone(registry.lookup("bad"))

    def testDecoratorRegistersAndReturnsClass(self):
        registry = Registry()

        @registry.command(("hello", "hi"), "greet")
        class Hello(Command):
            async def execute(self, context) -> CommandResult:
                return CommandResult.success("hello")

        self.assertTrue(issubclass(Hello, Command))
        self.assertEqual(registry.lookup("hi").handler, Hello)
        self.assertEqual(registry.lookup("HELLO").description, "greet")

    def testDecoratorRaisesFault(self):
        registry = Registry()
        with self.assertRaises(NoExecutorFoundError):
            @registry.command("nothing")
            class Nothing(Command):  # NOQA: F-841
                pass

    def testLookupAllKeepsRegistrationOrder(self):
        registry = Registry()
        registry.register(Ping, ["ping"])
        registry.register(OtherPing, ["ping", "p"])
        self.assertEqual([descriptor.handler for descriptor in registry.lookup_all("ping")], [Ping, OtherPing])
        self.assertEqual(registry.lookup("p").handler, OtherPing)
        self.assertIsNone(registry.lookup("pong"))

    def testFreeStandingDecorator(self):
        registry = Registry()

        @command(("hello", "hi"), "greet", registry=registry)
        class Hello(Command):
            async def execute(self, context) -> CommandResult:
                return CommandResult.success("hello")

        self.assertEqual(registry.lookup("hi").handler, Hello)
        with self.assertRaises(TypeError):
            command("hello", registry=None)

    def testRejectsInvalidConfiguration(self):
        with self.assertRaises(TypeError):
            Registry(trigger=1)
        with self.assertRaises(TypeError):
            Registry(parser="parser")
        with self.assertRaises(TypeError):
            Registry(context=object())


class TestDispatch(IsolatedAsyncioTestCase):

    def setUp(self):
        Echo.received = []
        Identity.instances = []
        OtherIdentity.instances = []
        self.registry = Registry(trigger="!")
        self.registry.register(Echo, ["echo"])
        self.registry.register(Whoami, ["whoami"])
        self.registry.register(Crash, ["crash"])
        self.registry.register(Sloppy, ["sloppy"])
        self.registry.register(Add, ["add"])
        self.registry.register(Identity, ["identity"])
        self.registry.register(OtherIdentity, ["other"])

    async def testEchoScenario(self):
        result = await self.registry.handle("!echo hello world")
        self.assertIs(result.status, Status.SUCCESS)
        self.assertEqual(result.short, "hello world")
        self.assertEqual(Echo.received, [["hello", "world"]])

    async def testEmptyInputIsInvalid(self):
        result = await self.registry.handle("")
        self.assertIs(result.status, Status.ERROR)
        self.assertEqual(result.short, "Invalid input")

    async def testUnknownCommand(self):
        result = await self.registry.handle("!unknown x")
        self.assertIs(result.status, Status.ERROR)
        self.assertEqual(result.short, "Unknown command")
        self.assertIn("'!unknown x'", result.long)

    async def testInputWithoutTriggerIsUnknown(self):
        result = await self.registry.handle("echo hello")
        self.assertEqual(result.short, "Unknown command")

    async def testTriggerCanBeOverriddenPerCall(self):
        result = await self.registry.handle("<@1> echo hi", trigger=Pattern(r"<@\d+>\s*"))
        self.assertIs(result.status, Status.SUCCESS)

    async def testInsufficientArguments(self):
        result = await self.registry.handle("!add 1")
        self.assertIs(result.status, Status.ERROR)
        self.assertEqual(result.short, "Command parsing failed")
        self.assertIn("requires 2 arguments but was provided with 1", result.long)

    async def testConversionFailure(self):
        result = await self.registry.handle("!add 1 two")
        self.assertEqual(result.short, "Command parsing failed")
        self.assertIsInstance(result.cause, ParsingFailedError)
        self.assertIn("ValueError", result.long)

    async def testArgumentsAreConverted(self):
        result = await self.registry.handle("!add 2 40")
        self.assertEqual(result.short, "42")

    async def testHandlerExceptionBecomesError(self):
        result = await self.registry.handle("!crash")
        self.assertIs(result.status, Status.ERROR)
        self.assertEqual(result.short, "Command execution failed")
        self.assertIsInstance(result.cause, RuntimeError)
        self.assertIn("handler exploded", result.long)

    async def testNonResultReturnBecomesError(self):
        result = await self.registry.handle("!sloppy")
        self.assertEqual(result.short, "Command execution failed")
        self.assertIsInstance(result.cause, TypeError)

    async def testMultiMatchWarnsAndRunsFirst(self):
        registry = Registry()
        registry.register(Ping, ["ping"])
        registry.register(OtherPing, ["ping"])
        result = await registry.handle("ping")
        self.assertIs(result.status, Status.WARNING)
        self.assertEqual(result.short, "pong")
        self.assertEqual(result.warnings, ("Multiple commands matched search string 'ping': Ping, OtherPing",))

    async def testMultiMatchKeepsErrorStatus(self):
        registry = Registry()
        registry.register(Crash, ["boom"])
        registry.register(Ping, ["boom"])
        result = await registry.handle("boom")
        self.assertIs(result.status, Status.ERROR)
        self.assertEqual(len(result.warnings), 1)

    async def testSubjectIsDeliveredPerCall(self):
        first, second = await asyncio.gather(
            self.registry.handle("!whoami", subject="alice"),
            self.registry.handle("!whoami", subject="bob"),
        )
        self.assertEqual((first.short, second.short), ("alice", "bob"))

    async def testCachedInstanceIsReused(self):
        await self.registry.handle("!identity")
        await self.registry.handle("!identity")
        await self.registry.handle("!other")
        first, second = Identity.instances
        self.assertIs(first, second)
        self.assertIsNot(first, OtherIdentity.instances[0])

    async def testCustomContextReachesHandlers(self):

        class Service(Context):
            __introspectable__ = Context.__introspectable__ + ("greeting",)

            def __init__(self, registry, parser, subject=None, greeting="hello"):
                super().__init__(registry, parser, subject)
                self._greeting = greeting

        class Greet(Command):
            async def execute(self, context: Service) -> CommandResult:
                return CommandResult.success(f"{context.greeting} {context.subject}")

        registry = Registry()
        registry.register(Greet, ["greet"])
        context = Service(registry, registry.parser, greeting="hey")
        result = await registry.handle("greet", context=context, subject="alice")
        self.assertEqual(result.short, "hey alice")

    async def testHandlerConstructionFailureBecomesError(self):

        class NeedsConnection(Command):
            def __init__(self, connection):
                self.connection = connection

            async def execute(self, context) -> CommandResult:
                return CommandResult.success()

        registry = Registry()
        registry.register(NeedsConnection, ["connect"])
        result = await registry.handle("connect")
        self.assertIs(result.status, Status.ERROR)
        self.assertEqual(result.short, "Command execution failed")
        self.assertIsInstance(result.cause, TypeError)

    async def testUncopyableContextBecomesError(self):

        class Service(Context):
            def __init__(self, registry, parser, connection, subject=None):
                super().__init__(registry, parser, subject)
                self.connection = connection

        registry = Registry()
        registry.register(Whoami, ["whoami"])
        result = await registry.handle("whoami", context=Service(registry, registry.parser, "db"), subject="alice")
        self.assertIs(result.status, Status.ERROR)
        self.assertEqual(result.short, "Command execution failed")
        self.assertIsInstance(result.cause, TypeError)

    async def testFailingZeroValueBindsNone(self):

        class Shade:
            def __init__(self, name=None):
                if name is None:
                    raise ValueError("no default shade")
                self.name = name

        class ShadeConverter:
            def from_tokens(self, tokens, context, subject, /):
                return Shade(" ".join(tokens))

            def from_token(self, token, context, subject, /):
                return Shade(token)

        class Paint(Command):
            async def execute(self, context, shade: Shade = Argument(optional=True)) -> CommandResult:
                return CommandResult.success(repr(shade))

        registry = Registry()
        registry.parser.register(Shade, ShadeConverter())
        registry.register(Paint, ["paint"])
        result = await registry.handle("paint")
        self.assertIs(result.status, Status.SUCCESS)
        self.assertEqual(result.short, "None")

    async def testContainerDefaultIsBoundAsDeclared(self):

        class Tag(Command):
            async def execute(self, context, tags: list[str] = Argument(repetitions=0, default=["x"])) -> CommandResult:
                return CommandResult.success(type(tags).__name__, " ".join(tags))

        registry = Registry()
        registry.register(Tag, ["tag"])
        result = await registry.handle("tag")
        self.assertEqual((result.short, result.long), ("list", "x"))
        result = await registry.handle("tag a b")
        self.assertEqual((result.short, result.long), ("list", "a b"))


class TestHelp(IsolatedAsyncioTestCase):

    def setUp(self):
        self.registry = Registry(trigger="!")
        self.registry.register(Help, ["help", Pattern.literal("?")])
        self.registry.register(Echo, ["echo", "say"])
        self.registry.register(Add, ["add"], "add two integers")

    async def testListsCommands(self):
        result = await self.registry.handle("!help")
        self.assertIs(result.status, Status.SUCCESS)
        self.assertIn("echo, say -- Repeat the given words.", result.long)
        self.assertIn("add -- add two integers", result.long)

    async def testDescribesOneCommand(self):
        result = await self.registry.handle("!help say")
        self.assertIs(result.status, Status.SUCCESS)
        self.assertEqual(result.short, "Echo")
        self.assertIn("Usage: say <words...>", result.long)
        self.assertIn("Aliases: echo, say", result.long)

    async def testUnknownTopic(self):
        result = await self.registry.handle("!help nothing")
        self.assertIs(result.status, Status.ERROR)


if __name__ == "__main__":
    unittest.main()
