"""Coarse tagging of container-runtime processes."""

from collections.abc import Iterable

CONTAINER_KEYWORDS = ("docker", "containerd", "runc", "podman", "kubepods")


class ContainerClassifier:
    """
    Case-sensitive substring match of a command line against runtime keywords.

    This is deliberately coarse: any process whose arguments merely mention
    one of the keywords (``grep docker``, ``vim runc.go``) is tagged too.
    """

    def __init__(self, keywords: Iterable[str] = CONTAINER_KEYWORDS) -> None:
        self.keywords = tuple(keywords)

    def __call__(self, command_line: str) -> bool:
        return self.classify(command_line)

    def classify(self, command_line: str) -> bool:
        return any(keyword in command_line for keyword in self.keywords)
