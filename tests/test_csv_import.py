"""CSV bulk import: row mapping, partial failures and upload handling"""

import csv
import io
from datetime import datetime, timezone

from meeting_scheduler.domain.meetings.csv_import import (
    COMPANY_A,
    COMPANY_B,
    MISSING_REQUIRED_FIELDS,
    ImportReport,
    map_row,
    missing_required_fields,
)
from meeting_scheduler.models import Meeting

HEADER = [
    "TIME",
    "VENUE",
    "country",
    "SG/MUM",
    COMPANY_A,
    f"{COMPANY_A} Email",
    f"{COMPANY_A} Phone",
    COMPANY_B,
    f"{COMPANY_B} Email",
    f"{COMPANY_B} Phone",
    "1st Broker",
    "1st Broker Email",
    "STATUS (Company A)",
    "STATUS (Company B)",
]


def _row(**overrides) -> dict:
    row = {
        "TIME": "2:30 PM",
        "VENUE": "Taj Lands End",
        "country": "India",
        "SG/MUM": "MUM",
        COMPANY_A: "Acme Insurance",
        f"{COMPANY_A} Email": "alice@acme.com",
        COMPANY_B: "Global Re",
        f"{COMPANY_B} Email": "bob@globalre.com",
    }
    row.update(overrides)
    return row


def _csv_bytes(rows) -> bytes:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=HEADER)
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue().encode("utf-8")


async def _upload(client, auth_headers, content, filename="meetings.csv", content_type="text/csv"):
    return await client.post(
        "/api/meetings/bulk-upload",
        files={"csvFile": (filename, content, content_type)},
        headers=auth_headers,
    )


def test_map_row_fills_defaults():
    now = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)

    data = map_row({COMPANY_A: "Acme", COMPANY_B: "Global Re"}, created_by=7, now=now)

    assert data["title"] == "Meeting: Acme - Global Re"
    assert data["description"] == "Meeting between Acme and Global Re"
    assert data["date"] == now
    assert data["time"] == "10:00 AM"
    assert data["venue"] == "TBD"
    assert data["location"] == ""
    assert data["created_by"] == 7
    assert data["company_a"] == {"name": "Acme", "email": "", "phone": ""}
    assert data["client_contact"] == {"name": "", "email": "", "phone": ""}


def test_map_row_reads_participant_columns():
    data = map_row(_row(**{"1st Broker": "Carol", "1st Broker Email": "carol@broker.com"}), created_by=1)

    assert data["time"] == "2:30 PM"
    assert data["location"] == "MUM"
    assert data["broker1"]["name"] == "Carol"
    assert data["broker1"]["email"] == "carol@broker.com"


def test_missing_required_fields():
    assert missing_required_fields(map_row(_row(), created_by=1)) is False
    assert missing_required_fields(map_row(_row(**{COMPANY_B: ""}), created_by=1)) is True


def test_import_report_response_omits_empty_errors():
    report = ImportReport(total_rows=2)
    report.record_success()
    report.record_success()

    response = report.to_response()

    assert response == {
        "message": "Bulk upload completed. 2 meetings created, 0 failed",
        "totalRows": 2,
        "successCount": 2,
        "failedCount": 0,
    }


async def test_bulk_upload_imports_every_valid_row(client, auth_headers, db, transport, upload_dir):
    content = _csv_bytes([_row(), _row(**{COMPANY_A: "Zenith Mutual", f"{COMPANY_A} Email": "zed@zenith.com"})])

    response = await _upload(client, auth_headers, content)

    assert response.status_code == 200
    body = response.json()
    assert body == {
        "message": "Bulk upload completed. 2 meetings created, 0 failed",
        "totalRows": 2,
        "successCount": 2,
        "failedCount": 0,
    }

    meetings = db.query(Meeting).order_by(Meeting.id).all()
    assert [m.title for m in meetings] == [
        "Meeting: Acme Insurance - Global Re",
        "Meeting: Zenith Mutual - Global Re",
    ]
    assert all(m.invitations_sent for m in meetings)
    assert len(transport.sent) == 4
    assert list(upload_dir.iterdir()) == []


async def test_bulk_upload_reports_failed_rows(client, auth_headers, db):
    content = _csv_bytes(
        [
            _row(),
            _row(**{COMPANY_B: ""}),
            _row(**{"SG/MUM": "NYC"}),
            _row(**{COMPANY_A: "Last Row Co"}),
        ]
    )

    response = await _upload(client, auth_headers, content)

    assert response.status_code == 200
    body = response.json()
    assert body["totalRows"] == 4
    assert body["successCount"] == 2
    assert body["failedCount"] == 2
    assert body["successCount"] + body["failedCount"] == body["totalRows"]

    errors = body["errors"]
    assert errors[0] == {"row": 3, "error": MISSING_REQUIRED_FIELDS}
    assert errors[1]["row"] == 4
    assert "location" in errors[1]["error"]

    assert db.query(Meeting).count() == 2


async def test_bulk_upload_keeps_rows_whose_invitations_fail(client, auth_headers, db, transport):
    transport.fail_for = {"alice@acme.com"}

    response = await _upload(client, auth_headers, _csv_bytes([_row()]))

    assert response.status_code == 200
    assert response.json()["successCount"] == 1

    meeting = db.query(Meeting).one()
    assert meeting.invitations_sent is False


async def test_bulk_upload_header_only_file(client, auth_headers, db, upload_dir):
    response = await _upload(client, auth_headers, _csv_bytes([]))

    assert response.status_code == 400
    assert response.json() == {"message": "CSV file is empty"}
    assert db.query(Meeting).count() == 0
    assert list(upload_dir.iterdir()) == []


async def test_bulk_upload_undecodable_file(client, auth_headers, db, upload_dir):
    response = await _upload(client, auth_headers, b"VENUE\n\xff\xfe\xfa\n")

    assert response.status_code == 500
    body = response.json()
    assert body["message"] == "Server error during bulk upload"
    assert "utf-8" in body["error"]
    assert db.query(Meeting).count() == 0
    assert list(upload_dir.iterdir()) == []


async def test_bulk_upload_rejects_non_csv(client, auth_headers):
    response = await _upload(client, auth_headers, b"hello", filename="notes.txt", content_type="text/plain")

    assert response.status_code == 400
    assert response.json() == {"message": "Only CSV files are allowed"}


async def test_bulk_upload_requires_a_file(client, auth_headers):
    response = await client.post("/api/meetings/bulk-upload", headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"message": "Please upload a CSV file"}


async def test_bulk_upload_requires_auth(client):
    response = await client.post(
        "/api/meetings/bulk-upload", files={"csvFile": ("m.csv", _csv_bytes([_row()]), "text/csv")}
    )

    assert response.status_code == 401
