"""
Console approver for the specification gate.

Shows a module's specification and asks a human to approve the
RequirementGathering -> Planning transition via CLI prompts.
"""

from rich.console import Console
from rich.prompt import Prompt
from rich.syntax import Syntax

from deliveryguard.application.phase_controller import PhaseTransitionController
from deliveryguard.domain.interfaces import SpecificationStoreInterface
from deliveryguard.domain.markdown import count_checkboxes


class ConsoleApprover:
    """
    Blocks the loop until a human approves or rejects the specification.

    Usable as the orchestrator's approver callable.
    """

    def __init__(
        self,
        store: SpecificationStoreInterface,
        console: Console | None = None,
        prompt_title: str = "SPECIFICATION REVIEW REQUIRED",
    ):
        """
        Args:
            store: Where the drafted specification is read from
            console: Output console (a fresh one by default)
            prompt_title: Title displayed in the review prompt
        """
        self._store = store
        self.console = console or Console()
        self.prompt_title = prompt_title

    def __call__(
        self, module_name: str, controller: PhaseTransitionController
    ) -> bool:
        """
        Display the specification and record the decision on the controller.

        Returns:
            True if approved
        """
        self.console.print(f"\n[bold yellow]═══ {self.prompt_title} ═══[/bold yellow]")
        self.console.print(f"[dim]Module: {module_name}[/dim]\n")

        content = self._store.read_specification(module_name)
        if not content:
            self.console.print("[red]No specification found; nothing to approve.[/red]")
            controller.reset()
            return False

        total, completed = count_checkboxes(content)
        self.console.print(
            Syntax(content, "markdown", theme="monokai", line_numbers=True)
        )
        self.console.print(
            f"\n[dim]Acceptance criteria: {completed}/{total} checked[/dim]"
        )

        decision = Prompt.ask(
            "\n[bold]Approve this specification?[/bold]",
            choices=["y", "n"],
            console=self.console,
        )

        if decision == "y":
            controller.approve()
            self.console.print("[green]✓ Approved: planning can begin[/green]")
            return True

        controller.reset()
        self.console.print("[red]✗ Rejected: specification stays in draft[/red]")
        return False
