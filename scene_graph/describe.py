"""Human-readable descriptions of scenes and nodes.

Example describe_scene() output:

    Scene "s1"  3 objects, 1 camera (active: cam)
      table  cube 2 x 0.1 x 1 at (+0.00, +0.75, +0.00)
        lamp  cylinder radius=0.1, height=0.5  [material: brass]
      cam  camera perspective, fov=60 at (+0.00, +2.00, +5.00)
"""

from __future__ import annotations

from rich.markup import escape
from rich.tree import Tree

from scene_graph import geometry
from scene_graph.scene import Node, Scene


def _fmt_vec(v) -> str:
    return f"({v[0]:+.2f}, {v[1]:+.2f}, {v[2]:+.2f})"


def describe_node(node: Node, scene: Scene | None = None) -> str:
    """One-line description of a node (without its id)."""
    parts = [node.kind.value]
    summary = geometry.get(node.kind).describe(node.params)
    if summary:
        parts.append(summary)
    if node.transform.position is not None:
        parts.append(f"at {_fmt_vec(node.transform.position)}")
    text = " ".join(parts)
    if node.material_id is not None:
        missing = scene is not None and scene.resolve_material(node) is None
        text += f"  [material: {node.material_id}{' (missing)' if missing else ''}]"
    elif node.material is not None:
        text += f"  [{node.material.type.value} material]"
    return text


def _header(scene: Scene) -> str:
    n_obj = len(scene.objects)
    n_cam = len(scene.cameras)
    header = f'Scene "{scene.id}"  {n_obj} object{"s" if n_obj != 1 else ""}'
    header += f', {n_cam} camera{"s" if n_cam != 1 else ""}'
    if scene.active_camera is not None:
        header += f" (active: {scene.active_camera})"
    return header


def _walk(scene: Scene):
    """Yield (depth, node) depth-first from every root, each node once.

    Nodes unreachable from a root (only possible when cycles are allowed)
    are yielded last, at depth 0.
    """
    seen: set[str] = set()
    for start in [*scene.roots(), *scene.objects.values()]:
        stack = [(0, start.id)]
        while stack:
            depth, oid = stack.pop()
            if oid in seen or oid not in scene.objects:
                continue
            seen.add(oid)
            node = scene.objects[oid]
            yield depth, node
            stack.extend((depth + 1, cid) for cid in reversed(node.children))


def describe_scene(scene: Scene) -> str:
    """Multi-line textual description of a scene's hierarchy."""
    lines = [_header(scene)]
    for depth, node in _walk(scene):
        lines.append(f"{'  ' * (depth + 1)}{node.id}  {describe_node(node, scene)}")

    if scene.materials:
        lines.append(f"  materials: {', '.join(sorted(scene.materials))}")
    for aid, anim in scene.animations.items():
        gone = "" if anim.target_id in scene.objects else " (target missing)"
        lines.append(
            f"  animation {aid}: {anim.property.value} of {anim.target_id}{gone}, "
            f"{len(anim.keyframes)} keyframes over {anim.duration:g}s"
            f"{', looping' if anim.loop else ''}"
        )
    return "\n".join(lines)


def hierarchy_tree(scene: Scene) -> Tree:
    """The scene hierarchy as a rich Tree, for terminal output."""
    tree = Tree(f"[bold]{escape(_header(scene))}[/bold]")
    branches: dict[str, Tree] = {}
    for depth, node in _walk(scene):
        parent_branch = branches.get(node.parent, tree) if depth else tree
        label = f"[cyan]{escape(node.id)}[/cyan]  {escape(describe_node(node, scene))}"
        if node.id == scene.active_camera:
            label += "  [green](active)[/green]"
        branches[node.id] = parent_branch.add(label, highlight=False)
    return tree
