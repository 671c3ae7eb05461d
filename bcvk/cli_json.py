"""Export an argparse command tree as JSON for documentation."""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict, dataclass, field
from typing import Any

_SKIPPED = {"help", "version"}


@dataclass
class CliOption:
    """An option (flag) of a command."""

    long: str
    short: str | None
    value_name: str | None
    default: str | None
    help: str
    possible_values: list[str] = field(default_factory=list)
    required: bool = False


@dataclass
class CliPositional:
    """A positional argument of a command."""

    name: str
    help: str | None
    required: bool
    multiple: bool


@dataclass
class CliCommand:
    """A command with its options, positionals and subcommands."""

    name: str
    about: str | None
    options: list[CliOption] = field(default_factory=list)
    positionals: list[CliPositional] = field(default_factory=list)
    subcommands: list[CliCommand] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Plain dictionary form, ready for JSON."""
        return asdict(self)


def _help_text(action: argparse.Action) -> str | None:
    if action.help is None or action.help == argparse.SUPPRESS:
        return None
    return action.help


def _takes_values(action: argparse.Action) -> bool:
    return action.nargs != 0


def _format_default(value: Any) -> str | None:
    if value is None or value == argparse.SUPPRESS:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return _format_default(value[0]) if value else None
    return str(value)


def _value_name(action: argparse.Action) -> str | None:
    if not _takes_values(action):
        return None
    metavar = action.metavar
    if isinstance(metavar, tuple):
        return metavar[0] if metavar else None
    return metavar if metavar is not None else action.dest.upper()


def _possible_values(action: argparse.Action) -> list[str]:
    values = [str(choice) for choice in action.choices or ()]
    if len(values) == 2 and set(values) == {"true", "false"}:
        return []
    return values


def _option(action: argparse.Action) -> CliOption:
    longs = [s[2:] for s in action.option_strings if s.startswith("--")]
    shorts = [
        s[1:]
        for s in action.option_strings
        if s.startswith("-") and not s.startswith("--")
    ]
    return CliOption(
        long=longs[0] if longs else action.dest,
        short=shorts[0] if shorts else None,
        value_name=_value_name(action),
        default=_format_default(action.default),
        help=_help_text(action) or "",
        possible_values=_possible_values(action),
        required=action.required,
    )


def _subcommands(action: argparse._SubParsersAction) -> list[CliCommand]:
    helps = {choice.dest: choice.help for choice in action._choices_actions}
    seen: set[int] = set()
    result = []
    for name, subparser in action.choices.items():
        if id(subparser) in seen:
            continue
        seen.add(id(subparser))
        help_text = helps.get(name)
        if help_text == argparse.SUPPRESS:
            continue
        command = command_to_json(subparser, name)
        if command.about is None:
            command.about = help_text
        result.append(command)
    return result


def command_to_json(
    parser: argparse.ArgumentParser, name: str | None = None
) -> CliCommand:
    """Describe ``parser`` and its visible subcommands."""
    command = CliCommand(name=name or parser.prog, about=parser.description)
    for action in parser._actions:
        if isinstance(action, argparse._SubParsersAction):
            command.subcommands.extend(_subcommands(action))
            continue
        if action.dest in _SKIPPED or isinstance(
            action, (argparse._HelpAction, argparse._VersionAction)
        ):
            continue
        if action.option_strings:
            command.options.append(_option(action))
        else:
            command.positionals.append(
                CliPositional(
                    name=action.dest,
                    help=_help_text(action),
                    required=action.required,
                    multiple=_takes_values(action),
                )
            )
    return command


def dump_cli_json(parser: argparse.ArgumentParser, name: str | None = None) -> str:
    """The whole command tree as pretty-printed JSON."""
    return json.dumps(command_to_json(parser, name).to_dict(), indent=2)