"""
Node metadata for pipeline introspection.

Each pipeline node declares which state fields it reads and writes and
which services it calls, so the CLI can print the graph with its data flow.

Usage:
    @dataclass
    class MyNode(BaseNode[ContentJobState]):
        metadata: ClassVar[NodeMetadata] = NodeMetadata(
            inputs=["payload"],
            outputs=["prompt"],
            services=["templates.resolve"],
        )
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class NodeMetadata:
    """
    Attributes:
        inputs: State fields read by this node
        outputs: State fields written by this node
        services: Service methods called (e.g., "generation.invoke")
        provider_cost: True if the node can spend provider credits
    """

    inputs: List[str] = field(default_factory=list)
    outputs: List[str] = field(default_factory=list)
    services: List[str] = field(default_factory=list)
    provider_cost: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "inputs": self.inputs,
            "outputs": self.outputs,
            "services": self.services,
            "provider_cost": self.provider_cost,
        }
