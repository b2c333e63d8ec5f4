"""
Interactive schema registry shell.

A line-oriented prompt over a SchemaRegistry:
- list, get, versions: inspect registered schemas
- validate: check a JSON payload typed at the prompt
- register, delete, compat: change the registry
- stats, demo: registry statistics and a canned validation run

Usage:
    mqschema-shell
    mqschema-shell --no-seed --log-level DEBUG

Invariants:
    - Registry errors are printed, never fatal to the loop
    - Multi-line JSON input ends at the first blank line
    - End of input (Ctrl-D) exits like the exit command

How to change safely:
    - Add commands to the dispatch table in SchemaShell.__init__
    - Keep each command to a single registry call plus formatting
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Callable, Dict, List, Optional, TextIO

from ..schema import (
    CompatibilityMode,
    RegisterOptions,
    RegistryError,
    SchemaKind,
    SchemaRegistry,
    register_builtin_schemas,
)

logger = logging.getLogger(__name__)

PROMPT = "[schema-registry] > "

HELP_TEXT = """
  Available commands:
    list, ls                 List registered schemas
    get, show <name>         Show a schema and its definition
    versions <name>          Show the version history of a schema
    validate <name>          Validate a JSON payload (ends at a blank line)
    register                 Register a schema interactively
    delete, rm <name>        Delete a schema and its history
    compat <name> <mode>     Set compatibility (NONE, BACKWARD, FORWARD, FULL)
    stats                    Registry statistics
    demo                     Run the validation demo
    clear, cls               Clear the screen
    help, h, ?               Show this help
    exit, quit, q            Leave the shell
"""

# (description, schema name, payload)
DEMO_CASES = [
    (
        "valid order",
        "OrderEvent",
        {
            "order_id": "ORD-001",
            "customer_id": "CUST-100",
            "amount": 150000,
            "status": "created",
            "created_at": "2024-01-15T10:30:00Z",
        },
    ),
    (
        "missing fields and bad values",
        "OrderEvent",
        {"order_id": "ORD-002", "amount": -5000, "status": "invalid_status"},
    ),
    (
        "valid payment",
        "PaymentEvent",
        {
            "payment_id": "PAY-001",
            "order_id": "ORD-001",
            "amount": 50000,
            "currency": "KRW",
            "status": "completed",
        },
    ),
    (
        "valid user event",
        "UserEvent",
        {"user_id": "USR-001", "action": "login", "timestamp": "2024-01-15T09:00:00Z"},
    ),
]


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


class SchemaShell:
    """Interactive shell bound to one registry.

    Example:
        >>> shell = SchemaShell(registry, stdin=io.StringIO("ls\\nexit\\n"), stdout=out)
        >>> shell.run()
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ) -> None:
        self.registry = registry
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self._commands: Dict[str, Callable[[List[str]], None]] = {}
        for names, handler in (
            (("help", "h", "?"), self.cmd_help),
            (("list", "ls"), self.cmd_list),
            (("get", "show"), self.cmd_get),
            (("versions",), self.cmd_versions),
            (("validate",), self.cmd_validate),
            (("register",), self.cmd_register),
            (("delete", "rm"), self.cmd_delete),
            (("compat",), self.cmd_compat),
            (("stats",), self.cmd_stats),
            (("demo",), self.cmd_demo),
            (("clear", "cls"), self.cmd_clear),
        ):
            for name in names:
                self._commands[name] = handler

    def write(self, text: str = "") -> None:
        print(text, file=self.stdout)

    def readline(self) -> Optional[str]:
        """Read one line without its newline; None at end of input."""
        line = self.stdin.readline()
        if not line:
            return None
        return line.rstrip("\r\n")

    def prompt(self, label: str) -> Optional[str]:
        self.stdout.write(label)
        self.stdout.flush()
        line = self.readline()
        return None if line is None else line.strip()

    def read_block(self) -> str:
        """Read lines until a blank line or end of input."""
        lines = []
        while True:
            line = self.readline()
            if line is None or not line.strip():
                break
            lines.append(line)
        return "\n".join(lines).strip()

    def run(self) -> None:
        """Run the prompt loop until exit or end of input."""
        self.write("  Schema Registry shell - type 'help' for commands.")
        while True:
            line = self.prompt(f"\n{PROMPT}")
            if line is None:
                self.write()
                break
            if not self.execute(line):
                break
        self.write("  Goodbye!")

    def execute(self, line: str) -> bool:
        """Execute one command line.

        Returns:
            False when the shell should exit, True otherwise
        """
        parts = line.split()
        if not parts:
            return True
        command, args = parts[0], parts[1:]

        if command in ("exit", "quit", "q"):
            return False

        handler = self._commands.get(command)
        if handler is None:
            self.write(f"  Unknown command: {command} (type 'help' for commands)")
            return True

        try:
            handler(args)
        except RegistryError as e:
            self.write(f"  Error: {e.message}")
        return True

    def _require_name(self, args: List[str], usage: str) -> Optional[str]:
        if not args:
            self.write(f"  Usage: {usage}")
            return None
        return args[0]

    def cmd_help(self, args: List[str]) -> None:
        self.write(HELP_TEXT.rstrip())

    def cmd_list(self, args: List[str]) -> None:
        schemas = self.registry.list()
        if not schemas:
            self.write("  No schemas registered.")
            return

        self.write(f"  {'ID':>4}  {'Name':<20} {'Version':<8} {'Type':<9} Description")
        self.write("  " + "-" * 72)
        for s in schemas:
            self.write(
                f"  {s.id:>4}  {truncate(s.name, 20):<20} v{s.version:<7} "
                f"{s.kind.value:<9} {truncate(s.description, 28)}"
            )
        self.write(f"\n  {len(schemas)} schema(s) registered.")

    def cmd_get(self, args: List[str]) -> None:
        name = self._require_name(args, "get <name>")
        if name is None:
            return
        schema = self.registry.get(name)
        details = schema.to_dict()

        self.write(f"  Schema:        {schema.name}")
        self.write(f"  ID:            {schema.id}")
        self.write(f"  Version:       v{schema.version}")
        self.write(f"  Type:          {schema.kind.value}")
        self.write(f"  Compatibility: {schema.compatibility.value}")
        self.write(f"  Description:   {schema.description}")
        self.write(f"  Created:       {schema.created_at:%Y-%m-%d %H:%M:%S}")
        self.write(f"  Updated:       {schema.updated_at:%Y-%m-%d %H:%M:%S}")
        self.write("\n  Definition:")
        definition = details["schema"]
        if isinstance(definition, str):
            body = definition
        else:
            body = json.dumps(definition, indent=4, ensure_ascii=False)
        for line in body.splitlines():
            self.write(f"    {line}")

    def cmd_versions(self, args: List[str]) -> None:
        name = self._require_name(args, "versions <name>")
        if name is None:
            return
        versions = self.registry.get_versions(name)
        self.write(f"  Version history of '{name}':")
        for record in versions:
            self.write(f"  - v{record.version}  {record.created_at:%Y-%m-%d %H:%M:%S}")

    def cmd_validate(self, args: List[str]) -> None:
        name = self._require_name(args, "validate <name>")
        if name is None:
            return
        self.registry.get(name)

        self.write("  Enter the JSON payload (finish with a blank line):")
        payload = self.read_block()
        if not payload:
            self.write("  No data entered.")
            return

        result = self.registry.validate(name, payload)
        if result.valid:
            self.write("  OK: payload matches the schema.")
        else:
            self.write(f"  FAILED: {result.message}")
            for error in result.errors:
                self.write(f"    - {error}")

    def cmd_register(self, args: List[str]) -> None:
        name = self.prompt("  Schema name: ")
        if not name:
            self.write("  A name is required.")
            return
        description = self.prompt("  Description: ") or ""
        type_text = self.prompt("  Type [json]: ") or "json"
        compat_text = self.prompt("  Compatibility [default]: ") or ""

        try:
            kind = SchemaKind.from_str(type_text)
            compatibility = CompatibilityMode.from_str(compat_text) if compat_text else None
        except ValueError as e:
            self.write(f"  Error: {e}")
            return

        self.write("  Enter the schema definition (finish with a blank line):")
        definition = self.read_block()
        if not definition:
            self.write("  A definition is required.")
            return

        schema = self.registry.register(
            name,
            kind,
            definition,
            RegisterOptions(description=description, compatibility=compatibility),
        )
        self.write(f"  Registered '{schema.name}' v{schema.version} (id={schema.id}).")

    def cmd_delete(self, args: List[str]) -> None:
        name = self._require_name(args, "delete <name>")
        if name is None:
            return
        self.registry.delete(name)
        self.write(f"  Deleted schema '{name}'.")

    def cmd_compat(self, args: List[str]) -> None:
        if len(args) < 2:
            self.write("  Usage: compat <name> <NONE|BACKWARD|FORWARD|FULL>")
            return
        try:
            mode = CompatibilityMode.from_str(args[1])
        except ValueError as e:
            self.write(f"  Error: {e}")
            return
        schema = self.registry.set_compatibility(args[0], mode)
        self.write(f"  Compatibility of '{schema.name}' is now {schema.compatibility.value}.")

    def cmd_stats(self, args: List[str]) -> None:
        stats = self.registry.get_stats()
        self.write(f"  Total schemas:  {stats['total_schemas']}")
        self.write(f"  Total versions: {stats['total_versions']}")
        self.write("  By type:")
        for kind, count in sorted(stats["by_type"].items()):
            self.write(f"    {kind:<10} {count}")

    def cmd_demo(self, args: List[str]) -> None:
        self.write("  Validation demo")
        for index, (description, schema_name, payload) in enumerate(DEMO_CASES, start=1):
            text = json.dumps(payload)
            self.write(f"\n  --- Case {index}: {description} ---")
            self.write(f"  Schema: {schema_name}")
            self.write(f"  Data:   {truncate(text, 60)}")

            result = self.registry.validate(schema_name, text)
            if result.valid:
                self.write("  Result: OK")
            else:
                self.write("  Result: FAILED")
                for error in result.errors:
                    self.write(f"    - {error}")
        self.write("\n  --- Demo finished ---")

    def cmd_clear(self, args: List[str]) -> None:
        self.stdout.write("\033[H\033[2J")
        self.stdout.flush()


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point for the interactive shell."""
    parser = argparse.ArgumentParser(description="Interactive schema registry shell")
    parser.add_argument(
        "--no-seed",
        action="store_true",
        help="Start with an empty registry instead of the builtin schemas",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    registry = SchemaRegistry()
    if not args.no_seed:
        register_builtin_schemas(registry)

    try:
        SchemaShell(registry).run()
    except KeyboardInterrupt:
        print("\n  Goodbye!")


if __name__ == "__main__":
    main()
