# Import all models once to ensure SQLAlchemy mapper registry is fully populated.
# This prevents late-binding issues for relationship("ClassName").

from .users.models import User, follows  # noqa: F401
from .auth.models import BlacklistToken  # noqa: F401
from .articles.models import Article, Like  # noqa: F401
from .bookmarks.models import Bookmark  # noqa: F401
from .subscriptions.models import Subscription  # noqa: F401
