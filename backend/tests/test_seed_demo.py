import importlib.util
from pathlib import Path

from fastapi.testclient import TestClient
from school_api.main import app

client = TestClient(app)


def _load_seed_module():
    path = Path(__file__).resolve().parents[1] / "scripts" / "seed_demo.py"
    spec = importlib.util.spec_from_file_location("seed_demo", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_seed_creates_linked_records():
    summary = _load_seed_module().main(students=4)
    assert summary == {'teachers': 2, 'courses': 3, 'students': 4}
    body = client.get('/teachers', params={'sortby': 'Name', 'populate': 'course,student'}).json()
    assert body['meta']['totalItems'] == 2
    ada = body['data'][0]
    assert ada['name'] == 'Ada Lovelace'
    assert sorted(c['name'] for c in ada['courses']) == ['Algebra', 'Calculus']
    enrolled = sum(len(c['students']) for t in body['data'] for c in t['courses'])
    assert enrolled == 4
