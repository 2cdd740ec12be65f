import pytest
from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError

from backend.services import profiles
from backend.services.avatar_storage import AvatarAsset, AvatarUpload

PNG_BYTES = b'\x89PNG\r\n\x1a\nfake-image'

STUDENT_FIELDS = {
    'name': 'Asha Rao',
    'phone_no': '+1 555 0100',
    'linked_in_url': 'https://linkedin.com/in/asha',
    'college_name': '  MIT ',
    'course_name': 'Computer Science',
}

ALUMNI_FIELDS = {
    **STUDENT_FIELDS,
    'company_name': 'Acme Corp',
    'location': 'Boston',
    'area_of_expertise': 'Distributed Systems',
}


def _avatar() -> AvatarUpload:
    return AvatarUpload(filename='me.png', content_type='image/png', content=PNG_BYTES)


def test_normalize_profile_fields_lowercases_categorical_fields() -> None:
    values = profiles.normalize_profile_fields('alumni', ALUMNI_FIELDS)

    assert values['college_name'] == 'mit'
    assert values['course_name'] == 'computer science'
    assert values['company_name'] == 'acme corp'
    assert values['location'] == 'boston'
    assert values['area_of_expertise'] == 'distributed systems'
    assert values['name'] == 'Asha Rao'
    assert values['user_type'] == 'alumni'


def test_normalize_profile_fields_drops_fields_outside_role() -> None:
    values = profiles.normalize_profile_fields('student', ALUMNI_FIELDS)

    assert 'company_name' not in values
    assert values['user_type'] == 'student'


@pytest.mark.parametrize('missing', ['company_name', 'location', 'area_of_expertise', 'phone_no'])
def test_normalize_profile_fields_requires_alumni_fields(missing: str) -> None:
    fields = {**ALUMNI_FIELDS, missing: '   '}

    with pytest.raises(HTTPException) as exception_info:
        profiles.normalize_profile_fields('alumni', fields)

    assert exception_info.value.status_code == 400
    assert missing in exception_info.value.detail


def test_normalize_profile_fields_rejects_unknown_role() -> None:
    with pytest.raises(HTTPException) as exception_info:
        profiles.normalize_profile_fields('admin', STUDENT_FIELDS)

    assert exception_info.value.status_code == 400


def test_update_profile_persists_student_fields_and_avatar(db_session, make_user, avatar_storage) -> None:
    user = make_user('asha')

    updated = profiles.update_profile(db_session, user, 'student', STUDENT_FIELDS, _avatar(), avatar_storage)

    assert updated.user_type == 'student'
    assert updated.college_name == 'mit'
    assert updated.phone_no == '+1 555 0100'
    assert updated.avatar_url.startswith('http://media.test/avatars/')
    assert (avatar_storage.root / updated.avatar_public_id).read_bytes() == PNG_BYTES


def test_update_profile_missing_field_persists_nothing(db_session, make_user, avatar_storage) -> None:
    user = make_user('asha')
    fields = {**ALUMNI_FIELDS}
    del fields['location']

    with pytest.raises(HTTPException) as exception_info:
        profiles.update_profile(db_session, user, 'alumni', fields, _avatar(), avatar_storage)

    assert exception_info.value.status_code == 400
    db_session.refresh(user)
    assert user.user_type is None
    assert user.college_name is None
    assert user.avatar_url is None
    assert not avatar_storage.root.exists()


def test_update_profile_requires_avatar(db_session, make_user, avatar_storage) -> None:
    user = make_user('asha')

    with pytest.raises(HTTPException) as exception_info:
        profiles.update_profile(db_session, user, 'student', STUDENT_FIELDS, None, avatar_storage)

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'Avatar is required'


def test_update_profile_fails_when_upload_yields_no_url(db_session, make_user, avatar_storage, monkeypatch) -> None:
    user = make_user('asha')
    monkeypatch.setattr(avatar_storage, 'upload', lambda avatar, owner_id: AvatarAsset(url=None, public_id=None))

    with pytest.raises(HTTPException) as exception_info:
        profiles.update_profile(db_session, user, 'student', STUDENT_FIELDS, _avatar(), avatar_storage)

    assert exception_info.value.status_code == 500
    assert exception_info.value.detail == 'Avatar not uploaded on cloud'
    db_session.refresh(user)
    assert user.user_type is None


def test_update_profile_replaces_previous_avatar(db_session, make_user, avatar_storage) -> None:
    user = make_user('asha')
    first = profiles.update_profile(db_session, user, 'student', STUDENT_FIELDS, _avatar(), avatar_storage)
    first_public_id = first.avatar_public_id

    second = profiles.update_profile(db_session, user, 'alumni', ALUMNI_FIELDS, _avatar(), avatar_storage)

    assert second.user_type == 'alumni'
    assert second.avatar_public_id != first_public_id
    assert not (avatar_storage.root / first_public_id).exists()
    assert (avatar_storage.root / second.avatar_public_id).exists()


def _failing_commit():
    raise SQLAlchemyError('database is locked')


def test_update_profile_failed_commit_rolls_back_and_removes_new_avatar(
    db_session, make_user, avatar_storage, monkeypatch
) -> None:
    user = make_user('asha')
    monkeypatch.setattr(db_session, 'commit', _failing_commit)

    with pytest.raises(HTTPException) as exception_info:
        profiles.update_profile(db_session, user, 'student', STUDENT_FIELDS, _avatar(), avatar_storage)

    assert exception_info.value.status_code == 500
    monkeypatch.undo()
    db_session.refresh(user)
    assert user.user_type is None
    assert user.avatar_url is None
    assert [path for path in avatar_storage.root.rglob('*') if path.is_file()] == []


def test_update_profile_failed_commit_survives_cleanup_error(
    db_session, make_user, avatar_storage, monkeypatch
) -> None:
    user = make_user('asha')
    monkeypatch.setattr(db_session, 'commit', _failing_commit)

    def refuse_delete(public_id):
        raise PermissionError(public_id)

    monkeypatch.setattr(avatar_storage, 'delete', refuse_delete)

    with pytest.raises(HTTPException) as exception_info:
        profiles.update_profile(db_session, user, 'student', STUDENT_FIELDS, _avatar(), avatar_storage)

    assert exception_info.value.status_code == 500
    assert exception_info.value.detail == 'Something went wrong while updating the profile'


def test_avatar_storage_rejects_unsupported_content_type(avatar_storage) -> None:
    with pytest.raises(HTTPException) as exception_info:
        avatar_storage.upload(
            AvatarUpload(filename='notes.txt', content_type='text/plain', content=b'hello'),
            owner_id='owner',
        )

    assert exception_info.value.status_code == 400


def test_avatar_storage_rejects_oversized_file(avatar_storage) -> None:
    with pytest.raises(HTTPException) as exception_info:
        avatar_storage.upload(
            AvatarUpload(filename='big.png', content_type='image/png', content=b'x' * 2048),
            owner_id='owner',
        )

    assert exception_info.value.status_code == 400


def test_avatar_storage_refuses_to_delete_outside_root(avatar_storage, tmp_path) -> None:
    outside = tmp_path / 'keep.txt'
    outside.write_text('keep')

    assert avatar_storage.delete('../keep.txt') is False
    assert outside.exists()
