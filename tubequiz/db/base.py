from tubequiz.db.base_class import Base  # noqa: F401

# Import all the models here so that Base has them registered
# This file should NOT be imported by models.
from tubequiz.models.video import Video  # noqa: F401
from tubequiz.models.segment import Segment  # noqa: F401
from tubequiz.models.question import Question  # noqa: F401
from tubequiz.models.response import Response  # noqa: F401
