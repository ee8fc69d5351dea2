from .community_tag import CommunityTag

__all__ = ["CommunityTag"]
