"""Low-level PDF object construction.

Types and helpers for the objects an overlay appends: object number
allocation, serialization of existing pikepdf values, and the override of
the target page object (new /Contents and /Resources).

Image and content stream objects are built in render.py.
Incremental update assembly is in incremental.py.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, TypedDict

from ...errors import MalformedDocument
from .. import require_pikepdf as _require_pikepdf

if TYPE_CHECKING:
    import pikepdf

__all__ = [
    "IMAGE_RESOURCE_PREFIX",
    "OverlayObjectNums",
    "PageTarget",
    "allocate_overlay_objects",
    "build_page_override",
    "image_resource_name",
    "inspect_page",
    "pdf_ref",
]


class OverlayObjectNums(TypedDict):
    """Object numbers allocated for one overlay.

    ``smask`` is None when the image is fully opaque.
    """

    img: int
    smask: int | None
    prefix: int  # content stream that saves the graphics state ("q")
    draw: int  # content stream that restores it and draws the image
    new_size: int


class PageTarget(TypedDict):
    """What the overlay needs to know about the target page."""

    obj_num: int
    gen: int
    contents: list[str]  # existing content stream references, in order
    entries: list[str]  # page dict entries except /Contents and /Resources
    resources: list[str]  # effective /Resources entries except /XObject
    xobjects: list[str]  # existing /XObject entries
    box: tuple[float, float, float, float]


# Resource names for overlay images are this prefix plus the image's
# object number, which keeps them unique across repeated overlays.
IMAGE_RESOURCE_PREFIX = "SbImg"


def pdf_ref(obj_num: int, gen: int = 0) -> str:
    """Format an indirect reference ("12 0 R")."""
    return f"{obj_num} {gen} R"


def _serialize_pikepdf_obj(obj: None | bool | int | float | pikepdf.Object) -> str:
    """Serialize a pikepdf object to a raw PDF string for embedding.

    Uses pikepdf's built-in unparse() for correct PDF syntax, with
    special handling for indirect references (emitted as "N G R")
    and plain Python types that pikepdf may return.
    """
    # Plain Python types (pikepdf sometimes returns these directly)
    if obj is None:
        return "null"
    if isinstance(obj, bool):
        return "true" if obj else "false"
    if isinstance(obj, int):
        return str(obj)
    if isinstance(obj, float):
        return str(int(obj)) if obj % 1 == 0.0 else f"{obj:.6f}"
    if isinstance(obj, Decimal):
        # pikepdf returns PDF reals as Decimal
        return format(obj, "f")
    pikepdf = _require_pikepdf()
    if isinstance(obj, pikepdf.Object) and obj.is_indirect:
        return pdf_ref(obj.objgen[0], obj.objgen[1])
    # unparse(resolved=True) resolves only the top level; nested indirect
    # objects stay as references.
    return obj.unparse(resolved=True).decode("latin-1")


def _dict_entries(obj: pikepdf.Object, skip: frozenset[str] = frozenset()) -> list[str]:
    # pikepdf dict requires .keys() -- __iter__ yields values, not keys
    return [f"{key} {_serialize_pikepdf_obj(obj[key])}" for key in obj.keys() if key not in skip]


def _content_refs(page_obj: pikepdf.Object) -> list[str]:
    """List the page's content streams as indirect references."""
    pikepdf = _require_pikepdf()
    contents = page_obj.get("/Contents")
    if contents is None:
        return []
    items = list(contents) if isinstance(contents, pikepdf.Array) else [contents]
    refs: list[str] = []
    for item in items:
        if not item.is_indirect:
            raise MalformedDocument("Page /Contents holds a direct object; streams must be indirect.")
        refs.append(pdf_ref(item.objgen[0], item.objgen[1]))
    return refs


def _effective_resources(page_obj: pikepdf.Object) -> pikepdf.Object | None:
    """Find /Resources on the page or the nearest ancestor /Pages node."""
    node: pikepdf.Object | None = page_obj
    seen: set[tuple[int, int]] = set()
    while node is not None:
        if "/Resources" in node:
            return node["/Resources"]
        if node.is_indirect:
            if node.objgen in seen:
                raise MalformedDocument("Cycle in page tree /Parent chain.")
            seen.add(node.objgen)
        node = node.get("/Parent")
    return None


def inspect_page(pdf: pikepdf.Pdf, page_index: int) -> PageTarget:
    """Collect everything needed to override the target page object.

    Inherited /Resources are copied onto the page so the override is
    self-contained and sibling pages are untouched.
    """
    from .position import get_page_box

    page_obj = pdf.pages[page_index].obj
    if not page_obj.is_indirect:
        raise MalformedDocument(f"Page {page_index} is not an indirect object.")
    obj_num, gen = page_obj.objgen

    resources = _effective_resources(page_obj)
    resource_entries: list[str] = []
    xobject_entries: list[str] = []
    if resources is not None:
        resource_entries = _dict_entries(resources, frozenset({"/XObject"}))
        xobjects = resources.get("/XObject")
        if xobjects is not None:
            xobject_entries = _dict_entries(xobjects)

    return {
        "obj_num": obj_num,
        "gen": gen,
        "contents": _content_refs(page_obj),
        "entries": _dict_entries(page_obj, frozenset({"/Contents", "/Resources"})),
        "resources": resource_entries,
        "xobjects": xobject_entries,
        "box": get_page_box(pdf, page_index),
    }


def allocate_overlay_objects(prev_size: int, has_smask: bool) -> OverlayObjectNums:
    """Allocate object numbers for one overlay, starting at the first free number."""
    next_obj = prev_size

    img_obj_num = next_obj
    next_obj += 1

    smask_obj_num = None
    if has_smask:
        smask_obj_num = next_obj
        next_obj += 1

    prefix_obj_num = next_obj
    next_obj += 1
    draw_obj_num = next_obj
    next_obj += 1

    return {
        "img": img_obj_num,
        "smask": smask_obj_num,
        "prefix": prefix_obj_num,
        "draw": draw_obj_num,
        "new_size": next_obj,
    }


def image_resource_name(img_obj_num: int) -> str:
    return f"/{IMAGE_RESOURCE_PREFIX}{img_obj_num}"


def build_page_override(target: PageTarget, obj_nums: OverlayObjectNums) -> str:
    """Build a raw override of the page object.

    The new /Contents brackets the existing streams with the prefix
    ("q") and draw ("Q ... ") streams, so whatever graphics state the
    original content leaves behind cannot leak into the overlay.
    """
    image_name = image_resource_name(obj_nums["img"])
    xobjects = [e for e in target["xobjects"] if e.split(" ", 1)[0] != image_name]
    xobjects.append(f"{image_name} {pdf_ref(obj_nums['img'])}")

    resources = [*target["resources"], f"/XObject << {' '.join(xobjects)} >>"]
    contents = [pdf_ref(obj_nums["prefix"]), *target["contents"], pdf_ref(obj_nums["draw"])]

    entries = [f"  {e}" for e in target["entries"]]
    entries.append(f"  /Resources << {' '.join(resources)} >>")
    entries.append(f"  /Contents [{' '.join(contents)}]")
    body = "\n".join(entries)
    return f"{target['obj_num']} {target['gen']} obj\n<<\n{body}\n>>\nendobj\n"
