from tubequiz.models.video import Video
from tubequiz.models.segment import Segment
from tubequiz.models.question import Question
from tubequiz.models.response import Response

__all__ = ["Video", "Segment", "Question", "Response"]
