"""
Tests for JSON persistence of the server state.
"""

import json
import os
import stat

import pytest

from wg_gen import manager
from wg_gen.errors import PersistenceFailure
from wg_gen.state import dict_to_state, load_state, save_state, state_to_dict


@pytest.fixture
def populated(server):
    state = server
    for name in ["alice", "bob", "carol", "dave"]:
        state, _ = manager.add_client(state, name, full_tunnel=(name == "bob"))
    state, _ = manager.remove_client(state, "alice")
    state, _ = manager.add_client(state, "eve", "10.0.0.100")
    state, _ = manager.remove_client(state, "carol")
    return state


class TestPersistence:

    def test_round_trip(self, tmp_path, populated):
        path = tmp_path / "wg-server.json"

        save_state(populated, path)
        loaded = load_state(path)

        assert loaded == populated
        assert loaded.clients[0].keys == populated.clients[0].keys
        assert loaded.next_address_offset == populated.next_address_offset

    def test_round_trip_empty(self, tmp_path, server):
        path = tmp_path / "wg-server.json"

        save_state(server, path)

        assert load_state(path) == server

    def test_field_names(self, populated):
        data = state_to_dict(populated)

        assert set(data) == {
            "endpoint", "listen_port", "network", "nat_interface",
            "keys", "clients", "next_address_offset",
        }
        assert set(data["clients"][0]) == {
            "name", "address", "keys", "server_endpoint", "server_port",
            "server_public_key", "allowed_ips",
        }
        assert dict_to_state(json.loads(json.dumps(data))) == populated

    def test_creates_parent_directory(self, tmp_path, server):
        path = tmp_path / "nested" / "dir" / "wg-server.json"

        save_state(server, path)

        assert path.exists()

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")
    def test_state_file_is_private(self, tmp_path, server):
        path = tmp_path / "wg-server.json"

        save_state(server, path)

        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_no_temporary_files_left(self, tmp_path, server):
        path = tmp_path / "wg-server.json"

        save_state(server, path)
        save_state(server, path)

        assert [p.name for p in tmp_path.iterdir()] == ["wg-server.json"]


class TestPersistenceFailure:

    def test_missing_file(self, tmp_path):
        path = tmp_path / "missing.json"

        with pytest.raises(PersistenceFailure) as excinfo:
            load_state(path)

        assert excinfo.value.path == path

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "wg-server.json"
        path.write_text("{not json")

        with pytest.raises(PersistenceFailure) as excinfo:
            load_state(path)

        assert excinfo.value.path == path

    def test_missing_field(self, tmp_path, server):
        path = tmp_path / "wg-server.json"
        data = state_to_dict(server)
        del data["keys"]
        path.write_text(json.dumps(data))

        with pytest.raises(PersistenceFailure):
            load_state(path)

    def test_unwritable_location(self, tmp_path, server):
        blocker = tmp_path / "file"
        blocker.write_text("")

        with pytest.raises(PersistenceFailure) as excinfo:
            save_state(server, blocker / "wg-server.json")

        assert excinfo.value.path == blocker / "wg-server.json"
