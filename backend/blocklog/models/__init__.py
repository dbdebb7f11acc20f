from blocklog.models.user import User  # noqa: F401
from blocklog.models.tag import Tag  # noqa: F401
from blocklog.models.block import Block, BlockStatus, block_tags  # noqa: F401
