import pytest
from datetime import datetime, timedelta

from credential_platform.credential_platform.auth_service.models import SessionToken, User


def register(client, username, password="testing12345"):
    return client.post("/register", json={"identifiant": username, "motdepasse": password})


def login(client, username, password="testing12345"):
    return client.post("/login", json={"identifiant": username, "motdepasse": password})


def verify(client, token):
    return client.post("/verify", json={"jeton": token})


def test_register_returns_token(client, username):
    response = register(client, username)
    assert response.status_code == 200
    body = response.json()
    assert body["statut"] == "Succès"
    assert body["message"] == f"Utilisateur {username} créé !"
    assert body["token"]


def test_register_stores_hash_not_password(client, store, username):
    register(client, username, "plain-secret")

    with store.session() as db:
        user = db.query(User).filter(User.username == username).first()
        assert user is not None
        assert user.password != "plain-secret"
        assert user.password.startswith("$pbkdf2-sha256$")


def test_register_duplicate_identifier(client, username):
    first = register(client, username)
    assert first.status_code == 200

    second = register(client, username, "another")
    assert second.status_code == 409
    assert second.json() == {"statut": "Erreur", "message": "Nom d'utilisateur déjà utilisé"}


def test_identifiers_are_case_sensitive(client, username):
    assert register(client, username).status_code == 200
    assert register(client, username.upper()).status_code == 200


def test_register_missing_fields(client):
    response = client.post("/register", json={"identifiant": "bob"})
    assert response.status_code == 400
    assert response.json() == {"statut": "Erreur", "message": "JSON incorrect"}


def test_register_empty_fields(client):
    response = client.post("/register", json={"identifiant": "", "motdepasse": ""})
    assert response.status_code == 400


def test_register_malformed_body(client):
    response = client.post("/register", content="not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json()["statut"] == "Erreur"


def test_register_accepts_english_field_names(client, username):
    response = client.post("/register", json={"identifier": username, "secret": "pw"})
    assert response.status_code == 200


def test_login_returns_new_token(client, username):
    reg = register(client, username)
    log = login(client, username)
    assert log.status_code == 200
    assert log.json()["message"] == f"Utilisateur {username} connecté !"
    assert log.json()["token"] != reg.json()["token"]


def test_login_failures_are_indistinguishable(client, username):
    register(client, username)

    wrong_password = login(client, username, "wrongpassword")
    unknown_user = login(client, "nobody_" + username, "testing12345")

    assert wrong_password.status_code == 401
    assert unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json()
    assert wrong_password.json()["message"] == "Identifiants incorrects"


def test_login_missing_fields(client):
    response = client.post("/login", json={"motdepasse": "x"})
    assert response.status_code == 400


def test_verify_returns_user(client, username):
    token = register(client, username).json()["token"]

    response = verify(client, token)
    assert response.status_code == 200
    body = response.json()
    assert body["statut"] == "Succès"
    assert body["message"] == "token validé !"
    assert body["utilisateur"]["identifiant"] == username
    assert isinstance(body["utilisateur"]["userId"], int)


def test_verify_missing_token(client):
    assert client.post("/verify", json={}).status_code == 400


def test_verify_unknown_token(client):
    response = verify(client, "not-a-token")
    assert response.status_code == 401
    assert response.json() == {"statut": "Erreur", "message": "Jeton inconnu"}


def test_verify_expired_token(client, store, username):
    token = register(client, username).json()["token"]

    with store.session() as db:
        row = db.query(SessionToken).filter(SessionToken.token == token).one()
        row.expires_at = datetime.utcnow() - timedelta(seconds=1)
        db.commit()

    assert verify(client, token).status_code == 401


def test_verify_does_not_extend_expiry(client, store, username):
    token = register(client, username).json()["token"]

    with store.session() as db:
        before = db.query(SessionToken).filter(SessionToken.token == token).one().expires_at

    assert verify(client, token).status_code == 200

    with store.session() as db:
        after = db.query(SessionToken).filter(SessionToken.token == token).one().expires_at
    assert after == before


def test_token_lifetime_is_one_hour(client, store, username):
    token = register(client, username).json()["token"]

    with store.session() as db:
        row = db.query(SessionToken).filter(SessionToken.token == token).one()
        lifetime = row.expires_at - datetime.utcnow()
    assert timedelta(minutes=59) <= lifetime <= timedelta(minutes=61)


def test_logout_twice(client, username):
    token = register(client, username).json()["token"]

    first = client.post("/logout", json={"jeton": token})
    assert first.status_code == 200
    assert first.json() == {"statut": "Succès", "message": "Utilisateur déconnecté !"}

    second = client.post("/logout", json={"jeton": token})
    assert second.status_code == 401
    assert second.json()["message"] == "Jeton inconnu"


def test_logout_missing_token(client):
    assert client.post("/logout", json={"jeton": ""}).status_code == 400


def test_update_requires_a_field(client, username):
    reg = register(client, username).json()
    user_id = verify(client, reg["token"]).json()["utilisateur"]["userId"]

    response = client.patch("/update", json={"id": user_id, "jeton": reg["token"]})
    assert response.status_code == 400


def test_update_requires_id(client, username):
    token = register(client, username).json()["token"]

    response = client.patch("/update", json={"jeton": token, "motdepasse": "pw2"})
    assert response.status_code == 400


def test_update_requires_valid_token(client, username):
    token = register(client, username).json()["token"]
    user_id = verify(client, token).json()["utilisateur"]["userId"]
    client.post("/logout", json={"jeton": token})

    response = client.patch("/update", json={"id": user_id, "jeton": token, "motdepasse": "pw2"})
    assert response.status_code == 401


def test_update_missing_token(client):
    response = client.patch("/update", json={"id": 1, "motdepasse": "pw2"})
    assert response.status_code == 400


def test_update_identifier(client, username):
    token = register(client, username).json()["token"]
    user_id = verify(client, token).json()["utilisateur"]["userId"]

    response = client.patch("/update", json={"id": user_id, "jeton": token, "identifiant": username + "_new"})
    assert response.status_code == 200
    assert response.json() == {"statut": "Succès", "message": "Les modifications ont bien été effectuées"}

    # the live token now resolves to the new identifier
    assert verify(client, token).json()["utilisateur"]["identifiant"] == username + "_new"
    assert login(client, username + "_new").status_code == 200
    assert login(client, username).status_code == 401


def test_update_duplicate_identifier(client, username):
    register(client, "taken_" + username)
    token = register(client, username).json()["token"]
    user_id = verify(client, token).json()["utilisateur"]["userId"]

    response = client.patch("/update", json={"id": user_id, "jeton": token, "identifiant": "taken_" + username})
    assert response.status_code == 409


def test_update_other_user_is_forbidden(client, username):
    victim_token = register(client, "victim_" + username).json()["token"]
    victim_id = verify(client, victim_token).json()["utilisateur"]["userId"]
    token = register(client, username).json()["token"]

    response = client.patch("/update", json={"id": victim_id, "jeton": token, "motdepasse": "owned"})
    assert response.status_code == 403
    assert login(client, "victim_" + username, "owned").status_code == 401


def test_session_scenario(client):
    t1 = register(client, "alice", "pw1").json()["token"]
    assert verify(client, t1).status_code == 200

    t2 = login(client, "alice", "pw1").json()["token"]
    assert t2 != t1
    assert verify(client, t1).status_code == 200
    assert verify(client, t2).status_code == 200

    assert client.post("/logout", json={"jeton": t1}).status_code == 200
    assert verify(client, t1).status_code == 401
    assert verify(client, t2).status_code == 200

    user_id = verify(client, t2).json()["utilisateur"]["userId"]
    update = client.patch("/update", json={"id": user_id, "jeton": t2, "motdepasse": "pw2"})
    assert update.status_code == 200

    assert login(client, "alice", "pw1").status_code == 401
    assert login(client, "alice", "pw2").status_code == 200


def test_cors_allows_configured_origin(client):
    response = client.options(
        "/login",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_register_oversized_secret(client, username):
    response = register(client, username, "x" * 5000)
    assert response.status_code == 400
    assert response.json() == {"statut": "Erreur", "message": "JSON incorrect"}


def test_login_oversized_secret_is_a_wrong_secret(client, username):
    register(client, username)

    oversized = login(client, username, "x" * 5000)
    wrong = login(client, username, "wrongpassword")
    assert oversized.status_code == 401
    assert oversized.json() == wrong.json()


def test_update_oversized_secret(client, username):
    token = register(client, username).json()["token"]
    user_id = verify(client, token).json()["utilisateur"]["userId"]

    response = client.patch("/update", json={"id": user_id, "jeton": token, "motdepasse": "x" * 5000})
    assert response.status_code == 400
    assert login(client, username).status_code == 200


def test_register_identifier_too_long(client):
    assert register(client, "a" * 64).status_code == 200

    response = register(client, "b" * 65)
    assert response.status_code == 400
    assert response.json() == {"statut": "Erreur", "message": "JSON incorrect"}


def test_update_identifier_too_long(client, username):
    token = register(client, username).json()["token"]
    user_id = verify(client, token).json()["utilisateur"]["userId"]

    response = client.patch("/update", json={"id": user_id, "jeton": token, "identifiant": "a" * 65})
    assert response.status_code == 400
    assert verify(client, token).json()["utilisateur"]["identifiant"] == username


@pytest.mark.parametrize("bad_id", [0, -1])
def test_update_rejects_non_positive_id(client, username, bad_id):
    token = register(client, username).json()["token"]

    response = client.patch("/update", json={"id": bad_id, "jeton": token, "motdepasse": "pw2"})
    assert response.status_code == 400
    assert login(client, username).status_code == 200
