"""Dependency resolution for multi-project manifests.

Expands a target project's transitive `depends` edges into a build order in
which every dependency comes before the projects that depend on it.

Design:
    - Explicit depth-first walk with a visiting set (cycle detection)
    - Declared `depends` order is preserved, duplicates collapse to one
    - Unknown names and cycles are fatal and surface before any compilation
"""

import logging
from typing import Dict, List, Sequence

from ..config.manifest import Project
from ..errors import DependencyCycleError, UnknownDependencyError


def resolve_build_order(projects: Sequence[Project], target: Project) -> List[Project]:
    """Compute the build order for a target project.

    Args:
        projects: Every project declared in the manifest
        target: Project to build

    Returns:
        Projects in build order, dependencies first, ending with the target

    Raises:
        UnknownDependencyError: If an edge names a project not in the manifest
        DependencyCycleError: If the target's dependency edges form a cycle
    """
    by_name: Dict[str, Project] = {project.name: project for project in projects}

    order: List[Project] = []
    done: set[str] = set()
    visiting: List[str] = []

    # Each frame is (project, index of the next dependency to visit).
    stack: List[tuple[Project, int]] = [(target, 0)]
    visiting.append(target.name)

    while stack:
        project, index = stack[-1]

        if index >= len(project.depends):
            stack.pop()
            visiting.pop()
            done.add(project.name)
            order.append(project)
            continue

        stack[-1] = (project, index + 1)
        dep_name = project.depends[index]

        if dep_name in done:
            continue
        if dep_name in visiting:
            cycle = visiting[visiting.index(dep_name):] + [dep_name]
            raise DependencyCycleError(cycle)

        dependency = by_name.get(dep_name)
        if dependency is None:
            raise UnknownDependencyError(dep_name, project.name)

        visiting.append(dep_name)
        stack.append((dependency, 0))

    logging.debug(f"Build order for {target.name}: {[p.name for p in order]}")
    return order
