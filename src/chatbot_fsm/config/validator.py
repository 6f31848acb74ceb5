"""Document validation utilities."""

from pathlib import Path
from typing import List, Union

from chatbot_fsm.config.builder import MachineBuilder
from chatbot_fsm.config.loader import DocumentLoader
from chatbot_fsm.config.schema import BuildOptions
from chatbot_fsm.exceptions import ChatbotFSMError


class DocumentValidator:
    """Validate machine documents without raising."""

    def __init__(self, options: BuildOptions | None = None):
        self.loader = DocumentLoader()
        self.builder = MachineBuilder(options)

    def validate_document(self, document: Union[bytes, str]) -> List[str]:
        """Validate document text.

        Args:
            document: Raw YAML text or bytes

        Returns:
            List of validation errors (empty if valid)
        """
        try:
            self.builder.build(self.loader.parse(document))
        except ChatbotFSMError as e:
            return [str(e)]
        return []

    def validate_file(self, file_path: Union[str, Path]) -> List[str]:
        """Validate a machine document file.

        Args:
            file_path: Path to the document

        Returns:
            List of validation errors (empty if valid)
        """
        try:
            self.builder.build(self.loader.load_from_file(file_path))
        except (ChatbotFSMError, OSError) as e:
            return [str(e)]
        return []
