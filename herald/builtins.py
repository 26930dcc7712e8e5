"""
Herald built-in commands.

- Help: lists the registered commands, or shows the usage, aliases and
  sub-commands of one of them. It reads everything from the registry found
  on its context, so it works with any Registry it is registered into:

      registry.register(Help, ("help", "?"), "show the available commands")
"""
from .commands import Command, Context
from .descriptors import Argument
from .results import CommandResult


def usage(descriptor, name=None, /):
    """
    One-line usage of ``descriptor``: ``name <required> [optional] [rest...]``.
    """
    parts = [name or str(descriptor.aliases[0])]
    for parameter in descriptor.parameters:
        label = parameter.name + ("..." if parameter.rest else "")
        parts.append(f"[{label}]" if parameter.optional else f"<{label}>")
    return " ".join(parts)


class Help(Command):
    """
    Show the available commands, or details about one command.
    """

    async def execute(self, context: Context, name: str = Argument(repetitions=0, optional=True, descr="command to describe")) -> CommandResult:
        registry = context.registry

        if not name:
            lines = []
            for descriptor in registry:
                line = ", ".join(map(str, descriptor.aliases))
                if descriptor.description:
                    line += " -- " + descriptor.description.splitlines()[0]
                lines.append(line)
            return CommandResult.success(f"{len(lines)} command(s) available", "\n".join(lines))

        words = name.split()
        descriptor = registry.lookup(words[0])
        if descriptor is None:
            return CommandResult.error("Unknown command", f"Unknown command {words[0]!r}.")

        path = words[:1]
        for word in words[1:]:
            folded = context.parser.fold(word)
            subcommand = next((sub for sub in descriptor.subcommands if sub.matches(folded)), None)
            if subcommand is None:
                break
            descriptor = subcommand
            path.append(word)

        lines = ["Usage: " + usage(descriptor, " ".join(path))]
        if descriptor.description:
            lines.append(descriptor.description)
        if len(descriptor.aliases) > 1:
            lines.append("Aliases: " + ", ".join(map(str, descriptor.aliases)))
        if descriptor.subcommands:
            lines.append("Sub-commands: " + ", ".join(str(sub.aliases[0]) for sub in descriptor.subcommands))
        for parameter in descriptor.parameters:
            if parameter.descr:
                lines.append(f"  {parameter.name}: {parameter.descr}")
        return CommandResult.success(descriptor.name, "\n".join(lines))


__all__ = (
    "Help",
    "usage",
)
