# src/converter/services/component_tree_service.py
import logging
from typing import Dict, List

import networkx as nx

from converter.model import ComponentDefinition, ComponentEdge, ComponentTree, ComponentTreeNode

logger = logging.getLogger(__name__)


class ComponentTreeBuilder:
    """
    Builds the containment tree of a split run on a directed graph.

    Edges point from a component to the components it contains; the
    resulting graph must be acyclic.
    """

    def build(self, components: List[ComponentDefinition]) -> ComponentTree:
        if not components:
            return ComponentTree()

        graph = self.to_graph(components)
        if not nx.is_directed_acyclic_graph(graph):
            cycle = nx.find_cycle(graph)
            raise ValueError(f"Component containment contains a cycle: {cycle}")

        nodes: Dict[str, ComponentTreeNode] = {
            c.id: ComponentTreeNode(id=c.id, depth=c.depth) for c in components
        }
        edges: List[ComponentEdge] = []

        for component in components:
            for child_id in component.children:
                if child_id not in nodes:
                    logger.warning("Component %s references unknown child %s.", component.id, child_id)
                    continue
                edges.append(ComponentEdge(from_=component.id, to=child_id))
                nodes[component.id].child_ids.append(child_id)
                nodes[child_id].parent_id = component.id

        for node in nodes.values():
            if node.parent_id is not None:
                node.siblings = [i for i in nodes[node.parent_id].child_ids if i != node.id]

        return ComponentTree(root=self.find_root(components, graph), nodes=nodes, edges=edges)

    @staticmethod
    def to_graph(components: List[ComponentDefinition]) -> nx.DiGraph:
        graph = nx.DiGraph()
        for component in components:
            graph.add_node(component.id, name=component.name, depth=component.depth)
        for component in components:
            for child_id in component.children:
                if child_id in graph:
                    graph.add_edge(component.id, child_id)
        return graph

    @staticmethod
    def find_root(components: List[ComponentDefinition], graph: nx.DiGraph) -> str:
        """Shallowest component without a parent; the first component otherwise."""
        parentless = [c for c in components if graph.in_degree(c.id) == 0 and not c.parent_id]
        if not parentless:
            return components[0].id
        return min(parentless, key=lambda c: c.depth).id
