import os
import sys
from datetime import datetime, timezone

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from wordstack_app import create_app, db
from wordstack_app.core.config import Config
from wordstack_app.modules.vocabulary.schemas import VocabularyCandidate
from wordstack_app.modules.vocabulary.services import InMemoryKeyValueBackend, VocabularyStore

STORAGE_KEY = 'testVocabulary'


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'connect_args': {'check_same_thread': False}
    }
    LOG_DIR = None
    LOG_LEVEL = 'WARNING'
    VOCABULARY_STORAGE_KEY = STORAGE_KEY
    REVIEW_SESSION_LIMIT = 5
    MAX_REVIEW_SESSIONS = 2


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def now():
    return datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def backend():
    return InMemoryKeyValueBackend()


@pytest.fixture
def store(backend):
    return VocabularyStore(backend, storage_key=STORAGE_KEY)


def candidate(word, translation='translation', context='', part_of_speech=None):
    return VocabularyCandidate(
        word=word,
        translation=translation,
        context=context,
        part_of_speech=part_of_speech,
    )
