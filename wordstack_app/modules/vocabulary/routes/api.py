"""
Vocabulary JSON API.

Endpoints:
  GET    /words                    - list (search, filter, sort)
  POST   /words                    - add a word or reinforce it
  GET    /words/<id>               - single word
  PATCH  /words/<id>               - edit display fields
  DELETE /words/<id>               - delete one word
  DELETE /words                    - delete everything
  POST   /words/<id>/review        - grade a recall (quality or button rating)
  POST   /words/<id>/master        - retire from active review
  GET    /due                      - words due now
  GET    /stats                    - totals per proficiency level
  GET    /export, POST /import     - backup and restore
  POST   /sessions                 - start a review session
  GET    /sessions/<sid>           - session progress and summary
  POST   /sessions/<sid>/review    - grade the current word
  POST   /sessions/<sid>/skip      - skip the current word
  DELETE /sessions/<sid>           - close the session
"""
from flask import Blueprint, current_app, jsonify, request

from wordstack_app.core.error_handlers import ValidationError, success_response

from ..exceptions import WordNotFoundError
from ..interface import VocabularyInterface
from ..logics.outcomes import FOUR_BUTTON_SCHEME, outcome_from_button, outcome_quality, parse_outcome
from ..schemas import Outcome, VocabularyCandidate

vocabulary_api_bp = Blueprint('vocabulary_api', __name__)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _outcome_from_body(data: dict) -> Outcome:
    if data.get('outcome') is not None:
        return parse_outcome(data['outcome'])
    if data.get('rating') is not None:
        return outcome_from_button(data['rating'], data.get('scheme') or FOUR_BUTTON_SCHEME)
    raise ValidationError('Either outcome or rating is required')


def _load_warning(store) -> dict:
    if store.load_error is None:
        return {}
    return {'warning': store.load_error.message}


# --- Words ---

@vocabulary_api_bp.route('/words', methods=['GET'])
def list_words():
    store = VocabularyInterface.get_store()
    items = store.query(
        search=request.args.get('search'),
        level_filter=request.args.get('filter', 'all'),
        sort_by=request.args.get('sort', 'recent'),
    )
    payload = success_response({'items': [i.to_dict() for i in items], 'total': len(items)})
    payload.update(_load_warning(store))
    return jsonify(payload)


@vocabulary_api_bp.route('/words', methods=['POST'])
def add_word():
    data = _json_body()
    candidate = VocabularyCandidate(
        word=str(data.get('word') or ''),
        translation=str(data.get('translation') or ''),
        context=str(data.get('context') or ''),
        part_of_speech=data.get('part_of_speech') or data.get('partOfSpeech'),
    )
    store = VocabularyInterface.get_store()
    existed = store.find_by_word(candidate.word) is not None
    item = store.add_or_reinforce(candidate)
    return jsonify(success_response(item.to_dict())), (200 if existed else 201)


@vocabulary_api_bp.route('/words/<word_id>', methods=['GET'])
def get_word(word_id):
    item = VocabularyInterface.get_store().require(word_id)
    return jsonify(success_response(item.to_dict()))


@vocabulary_api_bp.route('/words/<word_id>', methods=['PATCH'])
def edit_word(word_id):
    item = VocabularyInterface.get_store().update_details(word_id, **_json_body())
    return jsonify(success_response(item.to_dict()))


@vocabulary_api_bp.route('/words/<word_id>', methods=['DELETE'])
def delete_word(word_id):
    deleted = VocabularyInterface.get_store().delete(word_id)
    return jsonify(success_response({'deleted': deleted}))


@vocabulary_api_bp.route('/words', methods=['DELETE'])
def clear_words():
    count = VocabularyInterface.get_store().clear()
    return jsonify(success_response({'deleted': count}))


@vocabulary_api_bp.route('/words/<word_id>/review', methods=['POST'])
def review_word(word_id):
    data = _json_body()
    store = VocabularyInterface.get_store()
    if data.get('quality') is not None:
        item = store.apply_review(word_id, data['quality'])
    else:
        outcome = _outcome_from_body(data)
        if outcome is Outcome.MASTERED:
            item = store.mark_mastered(word_id)
        else:
            item = store.apply_review(word_id, outcome_quality(outcome))
    return jsonify(success_response(item.to_dict()))


@vocabulary_api_bp.route('/words/<word_id>/master', methods=['POST'])
def master_word(word_id):
    item = VocabularyInterface.get_store().mark_mastered(word_id)
    return jsonify(success_response(item.to_dict()))


@vocabulary_api_bp.route('/due', methods=['GET'])
def due_words():
    items = VocabularyInterface.get_store().due_items()
    return jsonify(success_response({'items': [i.to_dict() for i in items], 'total': len(items)}))


@vocabulary_api_bp.route('/stats', methods=['GET'])
def vocabulary_stats():
    store = VocabularyInterface.get_store()
    payload = success_response(store.stats().to_dict())
    payload.update(_load_warning(store))
    return jsonify(payload)


@vocabulary_api_bp.route('/export', methods=['GET'])
def export_vocabulary():
    body = VocabularyInterface.get_store().export_data()
    return current_app.response_class(body, mimetype='application/json')


@vocabulary_api_bp.route('/import', methods=['POST'])
def import_vocabulary():
    count = VocabularyInterface.get_store().import_data(request.get_data(as_text=True))
    return jsonify(success_response({'imported': count}))


# --- Review sessions ---

@vocabulary_api_bp.route('/sessions', methods=['POST'])
def start_session():
    data = _json_body()
    word_ids = data.get('word_ids')
    if word_ids is not None and not isinstance(word_ids, list):
        raise ValidationError('word_ids must be a list')
    session = VocabularyInterface.start_session(word_ids=word_ids)
    return jsonify(success_response(session.to_dict())), 201


@vocabulary_api_bp.route('/sessions/<session_id>', methods=['GET'])
def session_state(session_id):
    session = VocabularyInterface.get_session(session_id)
    return jsonify(success_response(session.to_dict()))


@vocabulary_api_bp.route('/sessions/<session_id>/review', methods=['POST'])
def session_review(session_id):
    session = VocabularyInterface.get_session(session_id)
    try:
        session.review(_outcome_from_body(_json_body()))
    except WordNotFoundError:
        # Word deleted while the session was open; the caller may skip it.
        current_app.logger.info("Session %s: current word no longer exists", session_id)
        raise
    return jsonify(success_response(session.to_dict()))


@vocabulary_api_bp.route('/sessions/<session_id>/skip', methods=['POST'])
def session_skip(session_id):
    session = VocabularyInterface.get_session(session_id)
    session.skip()
    return jsonify(success_response(session.to_dict()))


@vocabulary_api_bp.route('/sessions/<session_id>', methods=['DELETE'])
def close_session(session_id):
    session = VocabularyInterface.get_session(session_id)
    summary = session.summary().to_dict()
    VocabularyInterface.end_session(session_id)
    return jsonify(success_response(summary))
