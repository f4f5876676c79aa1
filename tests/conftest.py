from datetime import datetime, timezone
from freezegun.api import FakeDatetime
import pytest
from yaml.dumper import SafeDumper
from yaml.representer import SafeRepresenter
from agentshelf.models import Resource, ResourceType


def pytest_configure():
    SafeDumper.add_representer(FakeDatetime, SafeRepresenter.represent_datetime)


@pytest.fixture
def make_resource():
    def make(resource_id, name, rtype=ResourceType.AGENTS, content='', updated=None, created=None):
        created = created or datetime(2020, 1, 1, tzinfo=timezone.utc)
        return Resource(id=resource_id,
                        name=name,
                        content=content,
                        type=rtype,
                        folder_path=rtype.value,
                        created=created,
                        updated=updated or created)
    return make
