class LyricsTimelineError(Exception):
    pass


class FormatError(LyricsTimelineError, ValueError):
    pass


class UnknownFormat(LyricsTimelineError, ValueError):
    pass


class LineNotFound(LyricsTimelineError, KeyError):
    pass
