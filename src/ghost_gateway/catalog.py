"""Static catalog of the Ghost blog tools exposed by the gateway."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import ResultShape, TimeoutClass, ToolDescriptor


PostStatus = Literal["draft", "published"]
StatusFilter = Literal["draft", "published", "all"]
PostType = Literal["post", "page"]
AspectRatio = Literal["16:9", "1:1", "9:16", "4:3", "3:2"]


class UnknownToolError(Exception):
    pass


class ToolInput(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)


class OverridableInput(ToolInput):
    ghost_admin_api_key: Optional[str] = Field(
        default=None,
        description="Ghost Admin API key for a different blog (overrides server configuration)",
    )
    ghost_api_url: Optional[str] = Field(
        default=None,
        description="Ghost site URL for a different blog (overrides server configuration)",
    )


class NoInput(ToolInput):
    pass


class CreatePostInput(OverridableInput):
    title: str = Field(..., min_length=1, description="Title of the blog post")
    content: str = Field(..., min_length=1, description="Content in HTML or Markdown format")
    post_type: PostType = Field(default="post", description="Create a post or a page")
    status: PostStatus = Field(default="draft", description="Post status: draft or published")
    tags: Optional[List[str]] = Field(default=None, description="Tag names to assign")
    excerpt: Optional[str] = Field(default=None, description="Brief excerpt/summary")
    featured: Optional[bool] = Field(default=None, description="Whether to feature this post")
    use_generated_feature_image: Optional[bool] = Field(
        default=None, description="Generate an AI feature image (adds 60-300s)"
    )
    prefer_flux: Optional[bool] = Field(
        default=None, description="Use Replicate Flux for faster image generation"
    )
    prefer_imagen: Optional[bool] = Field(
        default=None, description="Use Google Imagen for higher quality images"
    )
    image_aspect_ratio: Optional[AspectRatio] = Field(
        default=None, description="Aspect ratio for the generated image"
    )
    is_test: bool = Field(default=True, description="Test mode: the backend simulates the post")


class SmartCreateInput(OverridableInput):
    user_input: str = Field(
        ..., min_length=1, description="Ideas, notes or topic to expand into a full post"
    )
    post_type: PostType = Field(default="post", description="Create a post or a page")
    status: PostStatus = Field(default="draft", description="Post status after creation")
    preferred_language: str = Field(
        default="English", description="Language for the generated content"
    )
    is_test: bool = Field(default=True, description="Test mode: the backend simulates the post")


class GetPostsInput(OverridableInput):
    limit: int = Field(default=10, ge=1, le=100, description="Maximum number of posts (1-100)")
    status: StatusFilter = Field(default="all", description="Filter by post status")
    featured: Optional[bool] = Field(default=None, description="Only featured posts")


class AdvancedSearchInput(OverridableInput):
    search: Optional[str] = Field(default=None, description="Text to find in title or content")
    tag: Optional[str] = Field(default=None, description="Tag name filter")
    status: StatusFilter = Field(default="all", description="Filter by post status")
    limit: int = Field(default=5, ge=1, le=50, description="Maximum results (1-50)")


class PostIdInput(OverridableInput):
    post_id: str = Field(..., min_length=1, description="The Ghost post ID")


class UpdatePostInput(PostIdInput):
    title: Optional[str] = Field(default=None, description="New title")
    content: Optional[str] = Field(default=None, description="New content in HTML or Markdown")
    excerpt: Optional[str] = Field(default=None, description="New excerpt/summary")
    tags: Optional[List[str]] = Field(default=None, description="Replacement tag names")
    status: Optional[PostStatus] = Field(default=None, description="Change post status")
    featured: Optional[bool] = Field(default=None, description="Change featured flag")


class UpdatePostImageInput(PostIdInput):
    use_generated_feature_image: bool = Field(
        default=True, description="Must be true to generate a new image"
    )
    prefer_flux: Optional[bool] = Field(
        default=None, description="Use Replicate Flux for faster image generation"
    )
    prefer_imagen: Optional[bool] = Field(
        default=None, description="Use Google Imagen for higher quality images"
    )
    image_aspect_ratio: AspectRatio = Field(default="16:9", description="Image aspect ratio")


class PostsSummaryInput(OverridableInput):
    days: int = Field(default=30, ge=1, le=365, description="Number of days to analyze")


class BatchGetDetailsInput(OverridableInput):
    post_ids: List[str] = Field(..., min_length=1, max_length=10, description="Up to 10 post IDs")


class SearchByDateInput(OverridableInput):
    pattern: str = Field(
        ...,
        min_length=4,
        pattern=r"^\d{4}(-\d{2}){0,2}$",
        description="YYYY, YYYY-MM or YYYY-MM-DD",
    )
    limit: int = Field(default=5, ge=1, le=50, description="Maximum results (1-50)")


_POST_FIELDS = ("id", "title", "status", "url", "tags", "featured", "excerpt", "feature_image")

_DESCRIPTORS = (
    ToolDescriptor(
        name="ghost_health_check",
        description="Check whether the Ghost Blog Smart API is running and healthy.",
        input_model=NoInput,
        method="GET",
        path="/health",
        accepts_override=False,
        result_shape=ResultShape.STATUS,
    ),
    ToolDescriptor(
        name="ghost_api_info",
        description="Get name, description, version and endpoints of the Ghost Blog Smart API.",
        input_model=NoInput,
        method="GET",
        path="/",
        accepts_override=False,
        result_shape=ResultShape.INFO,
    ),
    ToolDescriptor(
        name="ghost_create_post",
        description=(
            "Create a new post or page in Ghost CMS, optionally with an AI feature image. "
            "Set is_test=true to run without creating a real post."
        ),
        input_model=CreatePostInput,
        method="POST",
        path="/api/posts",
        timeout_class=TimeoutClass.SLOW,
        echo_fields=_POST_FIELDS + ("post_type", "is_test"),
        fast_path=(("prefer_flux", True), ("use_generated_feature_image", False), ("is_test", True)),
    ),
    ToolDescriptor(
        name="ghost_smart_create",
        description=(
            "Turn notes or ideas into a complete post with title, content and tags "
            "using AI content generation."
        ),
        input_model=SmartCreateInput,
        method="POST",
        path="/api/smart-create",
        timeout_class=TimeoutClass.SLOW,
        echo_fields=_POST_FIELDS + ("post_type", "preferred_language", "is_test"),
        fast_path=(("is_test", True),),
    ),
    ToolDescriptor(
        name="ghost_get_posts",
        description="List blog posts with optional status and featured filters.",
        input_model=GetPostsInput,
        method="GET",
        path="/api/posts",
        result_shape=ResultShape.COLLECTION,
        echo_fields=("limit", "status", "featured"),
    ),
    ToolDescriptor(
        name="ghost_advanced_search",
        description="Search posts by text and tag.",
        input_model=AdvancedSearchInput,
        method="GET",
        path="/api/posts/advanced",
        result_shape=ResultShape.COLLECTION,
        echo_fields=("search", "tag", "status", "limit"),
    ),
    ToolDescriptor(
        name="ghost_get_post_details",
        description="Get the full details of one post by its ID.",
        input_model=PostIdInput,
        method="GET",
        path="/api/posts/{post_id}",
        echo_fields=("id",),
    ),
    ToolDescriptor(
        name="ghost_update_post",
        description="Update an existing post. Only the supplied fields change.",
        input_model=UpdatePostInput,
        method="PUT",
        path="/api/posts/{post_id}",
        echo_fields=_POST_FIELDS,
    ),
    ToolDescriptor(
        name="ghost_update_post_image",
        description="Generate a new AI feature image for an existing post (60-300 seconds).",
        input_model=UpdatePostImageInput,
        method="PUT",
        path="/api/posts/{post_id}/image",
        timeout_class=TimeoutClass.SLOW,
        echo_fields=("id", "title", "feature_image", "image_aspect_ratio", "prefer_flux", "prefer_imagen"),
        fast_path=(("prefer_flux", True),),
    ),
    ToolDescriptor(
        name="ghost_delete_post",
        description="Permanently delete a post. This cannot be undone.",
        input_model=PostIdInput,
        method="DELETE",
        path="/api/posts/{post_id}",
        result_shape=ResultShape.DELETION,
        echo_fields=("post_id",),
    ),
    ToolDescriptor(
        name="ghost_posts_summary",
        description="Summary statistics: counts by status, recent activity and top tags.",
        input_model=PostsSummaryInput,
        method="GET",
        path="/api/posts/summary",
        result_shape=ResultShape.SUMMARY,
        echo_fields=("days",),
    ),
    ToolDescriptor(
        name="ghost_batch_get_details",
        description="Get details for up to 10 posts in one request.",
        input_model=BatchGetDetailsInput,
        method="POST",
        path="/api/posts/batch-details",
        result_shape=ResultShape.COLLECTION,
        echo_fields=("post_ids",),
    ),
    ToolDescriptor(
        name="ghost_search_by_date",
        description="Find posts by date pattern: YYYY, YYYY-MM or YYYY-MM-DD.",
        input_model=SearchByDateInput,
        method="GET",
        path="/api/posts/search/by-date-pattern",
        result_shape=ResultShape.COLLECTION,
        echo_fields=("pattern", "limit"),
    ),
)


def _build_catalog() -> Dict[str, ToolDescriptor]:
    catalog: Dict[str, ToolDescriptor] = {}
    for descriptor in _DESCRIPTORS:
        if descriptor.name in catalog:
            raise ValueError(f"Duplicate tool name: {descriptor.name}")
        catalog[descriptor.name] = descriptor
    return catalog


TOOL_CATALOG: Dict[str, ToolDescriptor] = _build_catalog()


def get_descriptor(name: str) -> ToolDescriptor:
    try:
        return TOOL_CATALOG[name]
    except KeyError:
        raise UnknownToolError(f"Unknown tool: {name}") from None


def validate_arguments(descriptor: ToolDescriptor, arguments: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Validate call arguments against the tool schema.

    Raises ``pydantic.ValidationError``. Unset optional fields are dropped so
    that sparse updates stay sparse.
    """
    model = descriptor.input_model.model_validate(arguments or {})
    return model.model_dump(exclude_none=True)


def input_schema(descriptor: ToolDescriptor) -> Dict[str, Any]:
    return descriptor.input_model.model_json_schema()
