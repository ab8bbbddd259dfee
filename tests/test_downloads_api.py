import pytest

from conftest import ADMIN, bearer, find


def test_external_file_scenario(client, create_file):
    created = create_file(name="Deck A", file_url="https://ex.com/a.pdf")
    file_id, token = created["fileId"], created["secureToken"]

    resp = client.get(f"/api/download/{file_id}", headers=bearer(token))
    assert resp.status_code == 200
    assert resp.json() == {
        "name": "Deck A",
        "type": "external",
        "serverPath": None,
        "fileUrl": "https://ex.com/a.pdf",
        "isLocalFile": False,
        "size": 0,
    }

    resp = client.get(
        f"/api/download/{file_id}/download", headers=bearer(token), follow_redirects=False
    )
    assert resp.status_code == 302
    assert resp.headers["location"] == "https://ex.com/a.pdf"

    # Redirects are not counted
    assert find(client, file_id)["accessCount"] == 0


def test_metadata_does_not_count(client, upload_file):
    created = upload_file()
    for _ in range(3):
        resp = client.get(f"/api/download/{created['fileId']}", headers=bearer(created["secureToken"]))
        assert resp.status_code == 200
        assert resp.json()["type"] == "application/octet-stream"
    record = find(client, created["fileId"])
    assert record["accessCount"] == 0
    assert "lastAccessed" not in record


def test_unknown_file_is_not_found(client):
    for path in ("/api/download/pitch_nope", "/api/download/pitch_nope/download"):
        resp = client.get(path, headers=bearer("anything"))
        assert resp.status_code == 404
        assert resp.json() == {"error": "File not found"}


@pytest.mark.parametrize("suffix", ["", "/download"])
def test_missing_or_malformed_authorization(client, create_file, suffix):
    created = create_file()
    url = f"/api/download/{created['fileId']}{suffix}"
    token = created["secureToken"]

    for headers in ({}, {"Authorization": token}, {"Authorization": f"Basic {token}"}, bearer("")):
        resp = client.get(url, headers=headers, follow_redirects=False)
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid authorization"}


@pytest.mark.parametrize("suffix", ["", "/download"])
def test_only_the_exact_token_is_accepted(client, create_file, suffix):
    created = create_file()
    other = create_file(name="Other")
    file_id, token = created["fileId"], created["secureToken"]
    url = f"/api/download/{file_id}{suffix}"

    candidates = [
        token[:-1],
        token + "x",
        token.upper(),
        token.lower(),
        "x" * len(token),
        "y" * 40,
        f"{file_id}{file_id}{file_id}",
        other["secureToken"],
        " " + token,
        "   " + token,
    ]
    for candidate in candidates:
        if candidate == token:
            continue
        resp = client.get(url, headers=bearer(candidate), follow_redirects=False)
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid token"}


def test_local_pdf_streams_inline(client, create_file, static_root):
    (static_root / "decks" / "b.pdf").write_bytes(b"%PDF-1.4 local deck")
    created = create_file(name="Series A Deck", file_url="/decks/b.pdf", is_local_file=True)
    headers = bearer(created["secureToken"])

    meta = client.get(f"/api/download/{created['fileId']}", headers=headers).json()
    assert meta["type"] == "application/pdf"
    assert meta["isLocalFile"] is True

    resp = client.get(f"/api/download/{created['fileId']}/download", headers=headers)
    assert resp.status_code == 200
    assert resp.content == b"%PDF-1.4 local deck"
    assert resp.headers["content-type"] == "application/pdf"
    disposition = resp.headers["content-disposition"]
    assert disposition.startswith("inline")
    assert "Series" in disposition

    record = find(client, created["fileId"])
    assert record["accessCount"] == 1
    assert record["lastAccessed"]


def test_local_pdf_missing_on_disk(client, create_file):
    created = create_file(name="Gone", file_url="/decks/missing.pdf", is_local_file=True)
    resp = client.get(
        f"/api/download/{created['fileId']}/download", headers=bearer(created["secureToken"])
    )
    assert resp.status_code == 404
    assert resp.json() == {"error": "File not found on server"}
    assert find(client, created["fileId"])["accessCount"] == 0


def test_local_pdf_cannot_escape_static_root(client, create_file):
    created = create_file(name="Sneaky", file_url="../files-db.json", is_local_file=True)
    resp = client.get(
        f"/api/download/{created['fileId']}/download", headers=bearer(created["secureToken"])
    )
    assert resp.status_code == 404


def test_upload_download_counts_each_access(client, upload_file):
    created = upload_file(content=b"quarterly numbers", filename="q3.pdf", name="Q3 Update")
    url = f"/api/download/{created['fileId']}/download"
    headers = bearer(created["secureToken"])

    previous = None
    for expected in (1, 2, 3):
        resp = client.get(url, headers=headers)
        assert resp.status_code == 200
        assert resp.content == b"quarterly numbers"
        assert resp.headers["content-disposition"].startswith("attachment")
        record = find(client, created["fileId"])
        assert record["accessCount"] == expected
        assert record["lastAccessed"] >= (previous or "")
        previous = record["lastAccessed"]


def test_failed_access_does_not_count(client, upload_file):
    created = upload_file()
    client.get(f"/api/download/{created['fileId']}/download", headers=bearer("wrong-token"))
    assert find(client, created["fileId"])["accessCount"] == 0


def test_upload_record_with_missing_blob(client):
    files = [
        {"id": "legacy", "name": "Legacy", "serverPath": "gone.pdf", "secureToken": "tok-legacy"},
        {"id": "orphan", "name": "Orphan", "secureToken": "tok-orphan"},
    ]
    client.post("/api/files/bulk", json={"files": files}, headers=ADMIN)

    resp = client.get("/api/download/legacy/download", headers=bearer("tok-legacy"))
    assert resp.status_code == 404
    assert resp.json() == {"error": "File not found on server"}

    resp = client.get("/api/download/orphan/download", headers=bearer("tok-orphan"))
    assert resp.status_code == 404
    assert resp.json() == {"error": "File not available for download"}


def test_record_without_token_is_never_accessible(client):
    client.post(
        "/api/files/bulk",
        json={"files": [{"id": "open", "name": "Open", "fileUrl": "https://ex.com/o.pdf"}]},
        headers=ADMIN,
    )
    resp = client.get("/api/download/open", headers=bearer("anything"))
    assert resp.status_code == 401


def test_deleted_file_token_stops_working(client, create_file):
    created = create_file()
    client.delete(f"/api/files/{created['fileId']}", headers=ADMIN)
    resp = client.get(f"/api/download/{created['fileId']}", headers=bearer(created["secureToken"]))
    assert resp.status_code == 404
