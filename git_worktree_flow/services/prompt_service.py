"""Interactive prompts used by the workflows.

Workflows only see the :class:`Prompter` interface. Every method returns
None when the user dismisses the prompt; workflows treat that as a silent
cancellation.
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from git_worktree_flow.utils.logging import get_logger

logger = get_logger(__name__)

Validator = Callable[[str], Optional[str]]


@dataclass
class Choice:
    """One selectable item."""
    label: str
    value: Any
    description: str = ""
    detail: Optional[str] = None


class Prompter:
    """Interface of the interactive surface."""

    def select(self, message: str, choices: Sequence[Choice]) -> Optional[Any]:
        """Pick one choice; returns its value."""
        raise NotImplementedError

    def select_many(self, message: str, choices: Sequence[Choice]) -> Optional[List[Any]]:
        """Pick any number of choices; returns their values."""
        raise NotImplementedError

    def ask_text(
        self, message: str, default: Optional[str] = None, validate: Optional[Validator] = None
    ) -> Optional[str]:
        """Ask for free text; ``validate`` returns an error message or None."""
        raise NotImplementedError

    def choose_action(self, message: str, actions: Sequence[str]) -> Optional[str]:
        """Offer a fixed set of buttons; returns the chosen label."""
        raise NotImplementedError


class RichPrompter(Prompter):
    """Numbered-menu prompts on a rich console.

    Blank input cancels (or accepts the default of a text prompt);
    Ctrl-C and end of input always cancel.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def _ask(self, prompt: str) -> Optional[str]:
        try:
            answer = self.console.input(prompt)
        except (EOFError, KeyboardInterrupt):
            self.console.print()
            return None
        return answer.strip()

    def _show_choices(self, message: str, choices: Sequence[Choice]) -> None:
        self.console.print(f"\n[bold]{escape(message)}[/bold]")
        for number, choice in enumerate(choices, start=1):
            line = f"  [cyan]{number:>2}[/cyan]. {escape(choice.label)}"
            if choice.description:
                line += f"  [dim]{escape(choice.description)}[/dim]"
            self.console.print(line)
            if choice.detail:
                for detail_line in choice.detail.splitlines():
                    self.console.print(f"      [yellow]{escape(detail_line)}[/yellow]")

    @staticmethod
    def _parse_numbers(answer: str, count: int) -> Optional[List[int]]:
        if answer.lower() == "all":
            return list(range(count))
        indexes = []
        for part in answer.replace(",", " ").split():
            if not part.isdigit() or not 1 <= int(part) <= count:
                return None
            index = int(part) - 1
            if index not in indexes:
                indexes.append(index)
        return indexes or None

    def select(self, message: str, choices: Sequence[Choice]) -> Optional[Any]:
        if not choices:
            return None
        self._show_choices(message, choices)
        while True:
            answer = self._ask("Choose a number (blank to cancel): ")
            if not answer:
                return None
            indexes = self._parse_numbers(answer, len(choices))
            if indexes and len(indexes) == 1:
                return choices[indexes[0]].value
            self.console.print(f"[red]Enter a number between 1 and {len(choices)}[/red]")

    def select_many(self, message: str, choices: Sequence[Choice]) -> Optional[List[Any]]:
        if not choices:
            return None
        self._show_choices(message, choices)
        while True:
            answer = self._ask("Choose numbers, comma separated, or 'all' (blank to cancel): ")
            if not answer:
                return None
            indexes = self._parse_numbers(answer, len(choices))
            if indexes:
                return [choices[i].value for i in indexes]
            self.console.print(f"[red]Enter numbers between 1 and {len(choices)}[/red]")

    def ask_text(
        self, message: str, default: Optional[str] = None, validate: Optional[Validator] = None
    ) -> Optional[str]:
        suffix = f" {escape(f'[{default}]')}" if default else ""
        while True:
            answer = self._ask(f"{escape(message)}{suffix}: ")
            if answer is None:
                return None
            if not answer:
                if not default:
                    return None
                answer = default
            error = validate(answer) if validate else None
            if error is None:
                return answer
            self.console.print(f"[red]{escape(error)}[/red]")

    def choose_action(self, message: str, actions: Sequence[str]) -> Optional[str]:
        return self.select(message, [Choice(label=action, value=action) for action in actions])
