"""Output formatter classes for lss.

This module provides the base output interface and a lookup of the
built-in formatters by name.
"""

from abc import ABC, abstractmethod

from lss.core.models import OutputFormat, ScanResult


class BaseOutput(ABC):
    """Abstract base class for all output formatters.

    Subclasses must implement the `name` property and `format` method.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this formatter (e.g. 'human', 'json')."""
        pass

    @abstractmethod
    def format(self, result: ScanResult) -> str:
        """Format a scan result for output.

        Args:
            result: The ScanResult to format.

        Returns:
            A formatted string representation of the scan result.
        """
        pass


def get_formatter(output_format: OutputFormat) -> BaseOutput:
    """Return a formatter instance for ``output_format``."""
    from lss.outputs.human_output import HumanOutput
    from lss.outputs.json_output import JsonOutput
    from lss.outputs.table_output import TableOutput

    formatters: dict[OutputFormat, type[BaseOutput]] = {
        OutputFormat.HUMAN: HumanOutput,
        OutputFormat.JSON: JsonOutput,
        OutputFormat.TABLE: TableOutput,
    }
    return formatters[output_format]()
