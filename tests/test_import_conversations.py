"""Tests for importing messages exports into the database."""

import pytest

from conftest import BLOG, MESSAGES_XML
from tev.errors import BlogMismatchParsingError
from tev.jobs.import_conversations import import_conversations
from tev.metadata import metadata_for_blog, update_metadata


@pytest.fixture
def convos_imported(repo, blog_md):
    return import_conversations(repo, BLOG, MESSAGES_XML)


def _by_participant(repo):
    return {c["participant"]: c for c in repo.list_conversations(BLOG)}


class TestImportConversations:
    def test_counts(self, convos_imported):
        assert convos_imported.to_dict() == {
            "blog": BLOG,
            "main_participant": "myblog",
            "conversations": 3,
            "created": 3,
            "merged": 0,
            "messages_added": 6,
            "overwritten": False,
        }

    def test_main_user_is_saved(self, repo, convos_imported):
        md = metadata_for_blog(repo, BLOG)
        assert md["main_tumblr_user"] == "myblog"
        assert md["main_tumblr_user_avatar_url"] == "https://avatars.tumblr.com/myblog_64.png"

    def test_conversations_and_messages(self, repo, convos_imported):
        convos = _by_participant(repo)
        assert set(convos) == {"alice", "bob", "carol"}
        alice = convos["alice"]
        assert alice["participant_id"] == "ALICEID"
        assert alice["num_messages"] == 3
        messages = repo.list_messages(alice["id"])
        assert [m["message"] for m in messages] == [
            "hi alice",
            "hi there",
            "https://media.tumblr.com/msg/photo_1280.jpg",
        ]
        assert [m["received"] for m in messages] == [0, 1, 1]

    def test_reimport_merges_without_duplicates(self, repo, convos_imported):
        res = import_conversations(repo, BLOG, MESSAGES_XML)
        assert res.created == 0
        assert res.merged == 3
        assert res.messages_added == 0
        assert len(repo.list_conversations(BLOG)) == 3
        assert len(repo.list_messages_for_blog(BLOG)) == 6

    def test_merge_adds_new_messages(self, repo, convos_imported):
        xml = b"""<conversations>
          <conversation>
            <participants>
              <participant avatar_url="https://a/myblog.png">myblog</participant>
              <participant avatar_url="https://a/alice_new.png">alice</participant>
            </participants>
            <messages>
              <message ts="1542552100" participant="MAINID" type="TEXT">hi alice</message>
              <message ts="1600000000" participant="ALICEID" type="TEXT">long time</message>
            </messages>
          </conversation>
          <conversation>
            <participants>
              <participant avatar_url="https://a/myblog.png">myblog</participant>
              <participant avatar_url="https://a/dave.png">dave</participant>
            </participants>
            <messages>
              <message ts="1600000001" participant="MAINID" type="TEXT">hey dave</message>
            </messages>
          </conversation>
        </conversations>"""
        res = import_conversations(repo, BLOG, xml)
        assert (res.created, res.merged, res.messages_added) == (1, 1, 2)

        convos = _by_participant(repo)
        alice = convos["alice"]
        assert alice["num_messages"] == 4
        assert alice["participant_avatar_url"] == "https://a/alice_new.png"
        assert "dave" in convos

    def test_hidden_flag_survives_merge(self, repo, convos_imported):
        with repo.conn():
            repo.set_conversation_hidden(BLOG, "bob", True)
        import_conversations(repo, BLOG, MESSAGES_XML)
        assert _by_participant(repo)["bob"]["hide_conversation"] == 1

    def test_overwrite_replaces_conversations(self, repo, blog_md, convos_imported):
        update_metadata(repo, blog_md["id"], {"overwrite_convo_data": True})
        with repo.conn():
            repo.set_conversation_hidden(BLOG, "bob", True)

        res = import_conversations(repo, BLOG, MESSAGES_XML)
        assert res.overwritten is True
        assert res.created == 3
        assert len(repo.list_messages_for_blog(BLOG)) == 6
        assert _by_participant(repo)["bob"]["hide_conversation"] == 0

    def test_document_of_another_blog(self, repo):
        with pytest.raises(BlogMismatchParsingError):
            import_conversations(repo, "otherblog", MESSAGES_XML)
        assert repo.list_conversations("otherblog") == []
