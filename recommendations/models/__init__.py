from .category import Category
from .entity import Entity
from .recommendation import Recommendation

__all__ = ["Category", "Entity", "Recommendation"]
