from blinker import Namespace

# Signal namespace for the vocabulary module.
# Every signal is sent after the change has been committed to the backend;
# a receiver that raises is logged by the sender and does not reach the caller.
_signals = Namespace()

# sender: VocabularyStore, item: VocabularyItem
word_added = _signals.signal('word-added')
word_reinforced = _signals.signal('word-reinforced')
word_deleted = _signals.signal('word-deleted')

# sender: VocabularyStore, item: VocabularyItem, quality: int
word_reviewed = _signals.signal('word-reviewed')

# sender: VocabularyStore, item: VocabularyItem
word_mastered = _signals.signal('word-mastered')

# sender: VocabularyStore, count: int (items removed)
vocabulary_cleared = _signals.signal('vocabulary-cleared')

# sender: VocabularyStore, error: PersistenceError
store_load_failed = _signals.signal('store-load-failed')

# sender: ReviewSession
review_session_started = _signals.signal('review-session-started')

# sender: ReviewSession, stats: SessionStats
review_session_completed = _signals.signal('review-session-completed')
