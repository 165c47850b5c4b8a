"""PDF page analysis, image overlay, and incremental update assembly."""

from .incremental import (
    assemble_incremental_update,
    build_xref_and_trailer,
    find_prev_startxref,
    find_root_obj_num,
)
from .objects import (
    IMAGE_RESOURCE_PREFIX,
    OverlayObjectNums,
    PageTarget,
    allocate_overlay_objects,
    build_page_override,
    image_resource_name,
    inspect_page,
)
from .overlay import OverlayResult, overlay_image
from .position import (
    get_page_box,
    get_page_count,
    get_page_dimensions,
    open_document,
    read_page_geometry,
    resolve_page_index,
)

__all__ = [
    "IMAGE_RESOURCE_PREFIX",
    "OverlayObjectNums",
    "OverlayResult",
    "PageTarget",
    "allocate_overlay_objects",
    "assemble_incremental_update",
    "build_page_override",
    "build_xref_and_trailer",
    "find_prev_startxref",
    "find_root_obj_num",
    "get_page_box",
    "get_page_count",
    "get_page_dimensions",
    "image_resource_name",
    "inspect_page",
    "open_document",
    "overlay_image",
    "read_page_geometry",
    "resolve_page_index",
]
