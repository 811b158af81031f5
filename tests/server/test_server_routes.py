import io
import unittest
from unittest.mock import Mock

from drive_fakes import FOLDER_MIME, FakeDrive, make_http_error, make_token_client
from drivegateway import __version__
from drivegateway.auth import ServiceAccountTokenClient, ServiceCredential
from drivegateway.config import GatewaySettings
from drivegateway.controller import DriveGateway
from drivegateway.server import create_app

CREDENTIAL = ServiceCredential(
    issuer="svc@example.iam.gserviceaccount.com",
    private_key="unused",
    client_id="1234",
)


def _client(drive, *, shared_drive_id="", max_upload_bytes=1024 * 1024, token_client=None, credential=CREDENTIAL):
    settings = GatewaySettings(
        credential=credential,
        shared_drive_id=shared_drive_id,
        max_upload_bytes=max_upload_bytes,
        log_level="WARNING",
    )
    gateway = DriveGateway(
        credential,
        shared_drive_id=shared_drive_id,
        cache_tokens=False,
        token_client=token_client or make_token_client(),
        service_factory=lambda token: drive,
    )
    return create_app(settings, gateway=gateway).test_client()


class TestHealthAndRouting(unittest.TestCase):
    def setUp(self) -> None:
        self.drive = FakeDrive()
        self.client = _client(self.drive)

    def test_health(self) -> None:
        for path in ("/", "/health"):
            resp = self.client.get(path)
            self.assertEqual(resp.status_code, 200)
            body = resp.get_json()
            self.assertEqual(body["status"], "healthy")
            self.assertEqual(body["version"], __version__)
            self.assertIn("/simple-upload", body["endpoints"])
            self.assertTrue(body["timestamp"].endswith("Z"))

    def test_unknown_path_is_404(self) -> None:
        resp = self.client.get("/nope")
        self.assertEqual(resp.status_code, 404)
        body = resp.get_json()
        self.assertEqual(body["error"], "Endpoint not found")
        self.assertEqual(body["path"], "/nope")
        self.assertIn("timestamp", body)

    def test_wrong_method_is_404(self) -> None:
        resp = self.client.post("/delete-file", json={"fileId": "X"})
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.get_json()["method"], "POST")
        self.assertEqual(self.drive.calls, [])

    def test_preflight(self) -> None:
        resp = self.client.options("/create-folder")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.headers["Access-Control-Allow-Origin"], "*")
        self.assertIn("DELETE", resp.headers["Access-Control-Allow-Methods"])

    def test_cors_on_errors_too(self) -> None:
        resp = self.client.get("/nope")
        self.assertEqual(resp.headers["Access-Control-Allow-Origin"], "*")


class TestFolderRoutes(unittest.TestCase):
    def setUp(self) -> None:
        self.drive = FakeDrive()
        self.client = _client(self.drive)

    def test_create_folder(self) -> None:
        resp = self.client.post("/create-folder", json={"folderName": "Physics 101", "parentId": "root"})

        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertTrue(body["success"])
        self.assertTrue(body["folder"]["id"])
        self.assertNotEqual(body["folder"]["id"], "root")
        self.assertEqual(body["folder"]["name"], "Physics 101")
        self.assertEqual(body["folder"]["mimeType"], FOLDER_MIME)

    def test_create_folder_without_name(self) -> None:
        resp = self.client.post("/create-folder", json={"parentId": "root"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "Folder name is required")
        self.assertEqual(self.drive.calls, [])

    def test_create_folder_with_non_json_body(self) -> None:
        resp = self.client.post("/create-folder", data="folderName=x")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "Request body must be a JSON object")

    def test_drive_error_is_500_with_status_and_body(self) -> None:
        self.drive.fail_with = make_http_error(403, {"error": {"message": "insufficientPermissions"}})
        resp = self.client.post("/create-folder", json={"folderName": "A"})
        self.assertEqual(resp.status_code, 500)
        self.assertIn("403", resp.get_json()["error"])
        self.assertIn("insufficientPermissions", resp.get_json()["error"])

    def test_create_course_structure(self) -> None:
        resp = self.client.post(
            "/create-course-structure",
            json={"companySlug": "acme", "courseTitle": "Physics"},
        )

        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertEqual(body["courseFolderName"], "[ACME] Physics")
        self.assertEqual(body["courseFolderId"], body["folderIds"]["courses"])
        self.assertEqual(len(set(body["folderIds"].values())), 3)

    def test_create_course_structure_requires_both_fields(self) -> None:
        resp = self.client.post("/create-course-structure", json={"companySlug": "acme"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "Company slug and course title are required")

    def test_create_topic_folder(self) -> None:
        resp = self.client.post(
            "/create-topic-folder",
            json={"parentFolderId": "P1", "topicName": "Bridge", "topicType": "project"},
        )
        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertEqual(body["folderName"], "🔧 Bridge")
        self.assertTrue(body["topicFolderId"])
        self.assertFalse(body["isExisting"])

    def test_create_topic_folder_reuses_existing(self) -> None:
        payload = {"parentFolderId": "P1", "topicName": "Org", "topicType": "company"}
        first = self.client.post("/create-topic-folder", json=payload).get_json()
        second = self.client.post("/create-topic-folder", json=payload).get_json()

        self.assertEqual(first["folderName"], "🏢 Org")
        self.assertTrue(second["isExisting"])
        self.assertEqual(second["topicFolderId"], first["topicFolderId"])
        self.assertEqual(len(self.drive.calls_of("create")), 1)

    def test_create_folder_defaults_to_shared_drive(self) -> None:
        drive = FakeDrive()
        client = _client(drive, shared_drive_id="SD1")

        resp = client.post("/create-folder", json={"folderName": "Physics 101"})

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["folder"]["parents"], ["SD1"])

    def test_create_folder_at_root_lands_in_shared_drive(self) -> None:
        drive = FakeDrive()
        client = _client(drive, shared_drive_id="SD1")

        resp = client.post("/create-folder", json={"folderName": "A", "parentId": "root"})

        self.assertEqual(resp.get_json()["folder"]["parents"], ["SD1"])

    def test_create_folder_without_shared_drive_uses_root(self) -> None:
        resp = self.client.post("/create-folder", json={"folderName": "A"})
        self.assertEqual(resp.get_json()["folder"]["parents"], ["root"])

    def test_list(self) -> None:
        self.client.post("/create-folder", json={"folderName": "A", "parentId": "P1"})
        self.client.post("/create-folder", json={"folderName": "B", "parentId": "P2"})

        resp = self.client.get("/list?folderId=P1&pageSize=10")

        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertEqual(body["total"], 1)
        self.assertEqual([f["name"] for f in body["files"]], ["A"])
        _, q, params = self.drive.calls_of("list")[0]
        self.assertEqual(q, "'P1' in parents and trashed=false")
        self.assertEqual(params["pageSize"], 10)
        self.assertEqual(params["corpora"], "user")

    def test_list_bad_page_size(self) -> None:
        for size in ("0", "1001", "ten"):
            with self.subTest(size=size):
                resp = self.client.get(f"/list?pageSize={size}")
                self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.drive.calls, [])

    def test_list_shared_drive_without_configuration(self) -> None:
        resp = self.client.get("/list?isSharedDrive=true")
        self.assertEqual(resp.status_code, 500)
        self.assertIn("Shared Drive ID not configured", resp.get_json()["error"])


class TestUploadAndDelete(unittest.TestCase):
    def setUp(self) -> None:
        self.drive = FakeDrive()
        self.client = _client(self.drive, max_upload_bytes=2048)

    def _upload(self, content=b"hello", filename="notes.txt", **form):
        data = {"file": (io.BytesIO(content), filename, "text/plain"), **form}
        return self.client.post("/simple-upload", data=data, content_type="multipart/form-data")

    def test_upload(self) -> None:
        resp = self._upload(folderId="F1")

        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertTrue(body["fileId"])
        self.assertEqual(body["fileName"], "notes.txt")
        self.assertTrue(body["webViewLink"])
        self.assertEqual(self.drive.contents[body["fileId"]], b"hello")
        self.assertEqual(self.drive.items[body["fileId"]]["mimeType"], "text/plain")

    def test_upload_with_explicit_file_name(self) -> None:
        resp = self._upload(folderId="F1", fileName="renamed.txt")
        self.assertEqual(resp.get_json()["fileName"], "renamed.txt")

    def test_upload_requires_folder(self) -> None:
        resp = self._upload()
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "Folder ID is required")
        self.assertEqual(self.drive.calls, [])

    def test_upload_requires_file(self) -> None:
        resp = self.client.post(
            "/simple-upload",
            data={"folderId": "F1"},
            content_type="multipart/form-data",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "No file provided")

    def test_upload_too_large(self) -> None:
        resp = self._upload(content=b"x" * 4096, folderId="F1")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("too large", resp.get_json()["error"])
        self.assertEqual(self.drive.calls, [])

    def test_upload_then_delete(self) -> None:
        file_id = self._upload(folderId="F1").get_json()["fileId"]

        resp = self.client.delete("/delete-file", json={"fileId": file_id, "fileName": "notes.txt"})

        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertEqual(body["deletedFileId"], file_id)
        self.assertEqual(body["fileName"], "notes.txt")
        self.assertNotIn("note", body)
        self.assertNotIn(file_id, self.drive.items)

    def test_delete_unknown_file_is_success(self) -> None:
        resp = self.client.delete("/delete-file", json={"fileId": "does-not-exist"})

        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertTrue(body["success"])
        self.assertEqual(body["fileName"], "Unknown File")
        self.assertIn("already deleted", body["note"])

    def test_delete_requires_id(self) -> None:
        resp = self.client.delete("/delete-file", json={})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "File ID is required")

    def test_delete_project_folder_removes_subtree(self) -> None:
        folder_id = self.client.post("/create-folder", json={"folderName": "Proj"}).get_json()["folder"]["id"]
        file_id = self._upload(folderId=folder_id).get_json()["fileId"]

        resp = self.client.delete(
            "/delete-project-folder",
            json={"folderId": folder_id, "projectTitle": "Bridge"},
        )

        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertEqual(body["deletedFolderId"], folder_id)
        self.assertEqual(body["message"], "Project folder deleted: Bridge")
        self.assertNotIn(file_id, self.drive.items)

    def test_delete_server_error_is_500(self) -> None:
        self.drive.fail_with = make_http_error(500, reason="backendError")
        resp = self.client.delete("/delete-file", json={"fileId": "X"})
        self.assertEqual(resp.status_code, 500)


class TestCredentialFailures(unittest.TestCase):
    def test_missing_private_key_fails_without_network(self) -> None:
        credential = ServiceCredential(issuer="svc@example.iam.gserviceaccount.com", private_key="")
        request = Mock()
        drive = FakeDrive()
        client = _client(
            drive,
            credential=credential,
            token_client=ServiceAccountTokenClient(credential, request=request),
        )

        resp = client.post("/create-folder", json={"folderName": "A"})

        self.assertEqual(resp.status_code, 500)
        self.assertIn("Missing Google service account credentials", resp.get_json()["error"])
        request.assert_not_called()
        self.assertEqual(drive.calls, [])


class TestValidateServiceAccount(unittest.TestCase):
    def test_without_shared_drive(self) -> None:
        drive = FakeDrive()
        token_client = make_token_client()
        resp = _client(drive, token_client=token_client).get("/validate-service-account")

        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertTrue(body["serviceAccount"]["tokenGenerated"])
        self.assertTrue(body["serviceAccount"]["hasPrivateKey"])
        self.assertEqual(body["serviceAccount"]["clientId"], "1234")
        self.assertEqual(body["driveApi"]["user"]["emailAddress"], "svc@example.iam.gserviceaccount.com")
        self.assertFalse(body["sharedDrive"]["configured"])
        self.assertIsNone(body["sharedDrive"]["test"])
        self.assertGreaterEqual(token_client.authenticate.call_count, 1)

    def test_with_accessible_shared_drive(self) -> None:
        drive = FakeDrive()
        drive.shared_drives["SD1"] = {"id": "SD1", "name": "Team"}
        body = _client(drive, shared_drive_id="SD1").get("/validate-service-account").get_json()

        self.assertTrue(body["sharedDrive"]["configured"])
        self.assertTrue(body["sharedDrive"]["test"]["success"])
        self.assertEqual(body["sharedDrive"]["test"]["data"]["name"], "Team")

    def test_with_inaccessible_shared_drive(self) -> None:
        drive = FakeDrive()
        resp = _client(drive, shared_drive_id="SD-missing").get("/validate-service-account")

        self.assertEqual(resp.status_code, 200)
        test = resp.get_json()["sharedDrive"]["test"]
        self.assertFalse(test["success"])
        self.assertIn("404", test["error"])


if __name__ == "__main__":
    unittest.main()
