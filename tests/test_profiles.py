import pytest

from shared.exceptions import InputError
from shared.models.entities import RoadmapNode
from shared.profiles.EntityProfileRoadmap import weighted_node_titles
from shared.text.normalizer import normalize


def test_profile_manager_resolves_types(profile_manager):
    assert profile_manager.get_profile("Course").get_entity_type() == "course"
    assert {p.get_entity_type() for p in profile_manager.get_profiles()} == {"course", "video", "roadmap"}


def test_profile_manager_rejects_unknown_type(profile_manager):
    with pytest.raises(InputError):
        profile_manager.get_profile("podcast")


def test_profile_manager_honours_configured_types(env, logger):
    from shared.helper.HelperConfig import HelperConfig
    from shared.profiles.EntityProfileManager import EntityProfileManager

    env.setenv("EMBEDDING_ENTITY_TYPES", "[course]")
    manager = EntityProfileManager(helper_config=HelperConfig(logger=logger))
    assert [p.get_entity_type() for p in manager.get_profiles()] == ["course"]
    with pytest.raises(InputError):
        manager.get_profile("video")


def test_embedding_id_and_namespace_are_stable(profile_manager):
    profile = profile_manager.get_profile("video")
    assert profile.create_embedding_id("42") == "video_42"
    assert profile.create_embedding_id("42") == profile.create_embedding_id("42")
    assert profile.get_namespace() == "video-embeddings"
    assert profile.get_id_metadata_key() == "videoId"


def test_course_end_to_end_text(profile_manager, course_payload):
    profile = profile_manager.get_profile("course")
    entity = profile.parse_entity(course_payload)

    raw = profile.extract_text(entity)
    assert raw == "Intro to Go programming beginner Basics"
    # "intro" is a noise word, "to" a stop word and "go" is below the minimum token length
    assert normalize(raw) == "programming beginner basics"


def test_course_sections_follow_order_field(profile_manager):
    profile = profile_manager.get_profile("course")
    entity = profile.parse_entity({
        "id": "c2",
        "title": "Docker",
        "subtitle": "Containers in practice",
        "description": "<b>Hands-on</b> containers",
        "outcomes": ["Build images", "Run compose"],
        "sections": [
            {"title": "Networking", "order": 2},
            {"title": "   ", "order": 0},
            {"title": "Images", "order": 1},
        ],
    })
    assert profile.extract_text(entity) == (
        "Docker Containers in practice Hands-on containers Build images Run compose Images Networking"
    )


def test_video_text_includes_language_prerequisites_and_tags(profile_manager):
    profile = profile_manager.get_profile("video")
    entity = profile.parse_entity({
        "_id": "v1",
        "title": "Async Python",
        "category": "programming",
        "subcategory": "python",
        "level": "intermediate",
        "language": "english",
        "outcomes": ["asyncio"],
        "prerequisites": ["generators"],
        "tags": ["concurrency"],
        "duration": 3600,
    })
    assert profile.extract_text(entity) == (
        "Async Python programming python intermediate english asyncio generators concurrency"
    )
    metadata = profile.build_metadata(entity, "u1")
    assert metadata["duration"] == "3600"
    assert metadata["videoId"] == "v1"


def test_roadmap_sequence_weighting():
    nodes = [RoadmapNode(title="Alpha"), RoadmapNode(title="Beta"), RoadmapNode(title="Gamma")]
    assert weighted_node_titles(nodes) == "Alpha Alpha Alpha Beta Beta Gamma"


def test_roadmap_weighting_is_capped_and_cleans_titles():
    nodes = [RoadmapNode(title=f"Step{i}") for i in range(5)]
    nodes[0] = RoadmapNode(title="Linux Basics3h")
    assert weighted_node_titles(nodes).split(" ")[:6] == ["Linux", "Basics", "Linux", "Basics", "Linux", "Basics"]
    assert weighted_node_titles([RoadmapNode(title="Only")]) == "Only"


def test_roadmap_text_sorted_by_sequence(profile_manager):
    profile = profile_manager.get_profile("roadmap")
    entity = profile.parse_entity({
        "_id": "r1",
        "title": "DevOps",
        "level": "beginner",
        "roadmapType": "career",
        "nodes": [
            {"title": "Kubernetes", "sequence": 2, "description": ["Orchestration"]},
            {"title": "Docker", "sequence": 1, "description": "**Containers**"},
        ],
    })
    assert profile.extract_text(entity) == "DevOps beginner Docker Docker Kubernetes Containers Orchestration"

    metadata = profile.build_metadata(entity, "u9")
    assert metadata["roadmapType"] == "career"
    assert metadata["nodeCount"] == 2


def test_metadata_bag_is_flat_and_without_nulls(profile_manager, course_payload):
    profile = profile_manager.get_profile("course")
    entity = profile.parse_entity({**course_payload, "category": None})
    metadata = profile.build_metadata(entity, "owner-1")

    assert metadata["courseId"] == "c1"
    assert metadata["sourceId"] == "c1"
    assert metadata["userId"] == "owner-1"
    assert metadata["difficulty"] == metadata["level"] == "beginner"
    assert metadata["sectionCount"] == 1
    assert metadata["type"] == "course"
    assert "category" not in metadata
    assert all(isinstance(value, (str, int, float)) for value in metadata.values())


def test_parse_entity_rejects_invalid_payload(profile_manager):
    with pytest.raises(InputError):
        profile_manager.get_profile("course").parse_entity({"title": "No id"})
