"""
Graph input.

Reads node/link graphs of the shape
{"nodes": [{"id": ...}, ...], "links": [{"source": ..., "target": ...}, ...]}
and normalizes them into records a Simulation accepts.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal, Mapping, Union

from .validation import ConfigurationError


def graph_from_dict(
    data: Mapping[str, Any],
    id_key: str = "id",
    link_key: Literal["id", "index"] = "id",
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """
    Normalize a parsed graph mapping.

    Args:
        data: Mapping with "nodes" and optional "links" lists
        id_key: Node field used as the node id (e.g. "code")
        link_key: "id" if link endpoints are node ids, "index" if they are
            positions in the nodes list

    Returns:
        (nodes, links) as new lists of dicts; the input is not modified

    Raises:
        ConfigurationError: If the mapping is malformed or an index endpoint
            is out of range
    """
    if link_key not in ("id", "index"):
        raise ConfigurationError(f"link_key must be 'id' or 'index', got {link_key!r}")
    if "nodes" not in data:
        raise ConfigurationError("Graph data has no 'nodes' list")

    nodes: list[dict[str, Any]] = []
    for i, record in enumerate(data["nodes"]):
        if not isinstance(record, Mapping):
            raise ConfigurationError(f"Node {i}: expected a mapping, got {type(record).__name__}")
        node = dict(record)
        if id_key != "id" and id_key in node:
            node["id"] = node[id_key]
        nodes.append(node)

    issues: list[str] = []
    links: list[dict[str, Any]] = []
    for i, record in enumerate(data.get("links", [])):
        if not isinstance(record, Mapping):
            issues.append(f"Link {i}: expected a mapping, got {type(record).__name__}")
            continue
        link = dict(record)
        if link_key == "index":
            for attr in ("source", "target"):
                endpoint = link.get(attr)
                if not isinstance(endpoint, int) or not 0 <= endpoint < len(nodes):
                    issues.append(f"Link {i}: {attr} index {endpoint!r} out of range")
                    continue
                link[attr] = nodes[endpoint].get("id", endpoint)
        links.append(link)

    if issues:
        raise ConfigurationError("Invalid graph data:\n" + "\n".join(issues))
    return nodes, links


def load_graph(
    filepath: Union[str, Path],
    id_key: str = "id",
    link_key: Literal["id", "index"] = "id",
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """
    Load a graph from a JSON file.

    Example:
        nodes, links = load_graph("countries.json", id_key="code", link_key="index")
        simulation = Simulation(nodes, links)
    """
    with open(filepath) as f:
        data = json.load(f)
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"{filepath}: expected a JSON object at top level")
    return graph_from_dict(data, id_key=id_key, link_key=link_key)


__all__ = ["graph_from_dict", "load_graph"]
