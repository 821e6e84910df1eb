"""
Tool-discipline guardrail.

Warns when an invocation makes too many tool calls, re-reads the same file,
or retries the same command. Never blocks.
"""

from deliveryguard.domain.models import GuardrailContext, GuardrailResult


class ToolDisciplineGuardrail:
    """Flags wasteful tool usage within one agent invocation."""

    def __init__(
        self,
        tool_call_threshold: int = 50,
        max_file_reads: int = 3,
        max_command_retries: int = 3,
    ):
        """
        Args:
            tool_call_threshold: Calls per invocation before warning
            max_file_reads: Reads of a single file before warning
            max_command_retries: Runs of a single command before warning

        Raises:
            ValueError: If any limit is not positive
        """
        if min(tool_call_threshold, max_file_reads, max_command_retries) <= 0:
            raise ValueError("tool discipline limits must be positive")
        self.tool_call_threshold = tool_call_threshold
        self.max_file_reads = max_file_reads
        self.max_command_retries = max_command_retries

    def __call__(self, context: GuardrailContext) -> GuardrailResult:
        warnings: list[str] = []

        count = context.tool_call_count
        if count > self.tool_call_threshold * 2:
            warnings.append(
                f"Excessive tool usage: {count} calls this invocation "
                f"(more than twice the limit of {self.tool_call_threshold}). "
                "Stop exploring and act on what you have."
            )
        elif count > self.tool_call_threshold:
            warnings.append(
                f"High tool usage: {count} calls this invocation "
                f"(limit {self.tool_call_threshold}). Consolidate your approach."
            )

        for path, reads in context.file_read_counts:
            if reads > self.max_file_reads:
                warnings.append(
                    f"File '{path}' read {reads} times. Keep its content in context "
                    "instead of re-reading."
                )

        for command, runs in context.command_retry_counts:
            if runs > self.max_command_retries:
                warnings.append(
                    f"Command '{command}' run {runs} times. Investigate the failure "
                    "before retrying."
                )

        if warnings:
            return GuardrailResult.warn("\n".join(warnings))
        return GuardrailResult.passed()
