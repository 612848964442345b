"""SQL used by the repositories.

Every statement the store runs is defined here.
"""

SCHEMA = """
CREATE TABLE IF NOT EXISTS memories (
    id TEXT PRIMARY KEY,
    container_tag TEXT NOT NULL,
    content TEXT NOT NULL,
    metadata TEXT,
    custom_id TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    forgotten_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_container_tag ON memories(container_tag);
CREATE INDEX IF NOT EXISTS idx_custom_id ON memories(custom_id);
CREATE INDEX IF NOT EXISTS idx_forgotten ON memories(forgotten_at);

CREATE TABLE IF NOT EXISTS profile_facts (
    id TEXT PRIMARY KEY,
    container_tag TEXT NOT NULL,
    fact TEXT NOT NULL,
    fact_type TEXT NOT NULL DEFAULT 'dynamic',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_profile_container ON profile_facts(container_tag);
CREATE INDEX IF NOT EXISTS idx_profile_type ON profile_facts(fact_type);
"""


def _placeholders(count: int) -> str:
    return ", ".join("?" for _ in range(count))


class MemoryQueries:
    """Statements over the ``memories`` table."""

    INSERT = """
        INSERT INTO memories (id, container_tag, content, metadata, custom_id, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
    """

    GET_BY_ID = "SELECT * FROM memories WHERE id = ?"

    FORGET_BY_ID = """
        UPDATE memories SET forgotten_at = ?
        WHERE id = ? AND container_tag = ? AND forgotten_at IS NULL
    """

    FORGET_BY_CONTENT = """
        UPDATE memories SET forgotten_at = ?
        WHERE content = ? AND container_tag = ? AND forgotten_at IS NULL
    """

    DELETE_CONTAINER = "DELETE FROM memories WHERE container_tag = ?"

    COUNT_ALL_ACTIVE = "SELECT COUNT(*) AS count FROM memories WHERE forgotten_at IS NULL"

    DISTINCT_CONTAINERS = "SELECT DISTINCT container_tag FROM memories ORDER BY container_tag"

    @staticmethod
    def list_active(tag_count: int) -> str:
        """Newest first; rowid breaks ties between identical timestamps."""
        return f"""
            SELECT * FROM memories
            WHERE container_tag IN ({_placeholders(tag_count)}) AND forgotten_at IS NULL
            ORDER BY created_at DESC, rowid DESC
            LIMIT ? OFFSET ?
        """

    @staticmethod
    def count_active(tag_count: int) -> str:
        return f"""
            SELECT COUNT(*) AS count FROM memories
            WHERE container_tag IN ({_placeholders(tag_count)}) AND forgotten_at IS NULL
        """

    @staticmethod
    def delete_by_ids(id_count: int) -> str:
        return f"DELETE FROM memories WHERE id IN ({_placeholders(id_count)})"


class ProfileQueries:
    """Statements over the ``profile_facts`` table."""

    INSERT = """
        INSERT INTO profile_facts (id, container_tag, fact, fact_type, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?)
    """

    # One entry per distinct fact text, ordered by its most recent update
    LIST_DISTINCT_BY_TYPE = """
        SELECT fact, MAX(updated_at) AS last_updated FROM profile_facts
        WHERE container_tag = ? AND fact_type = ?
        GROUP BY fact
        ORDER BY last_updated DESC, MAX(rowid) DESC
        LIMIT ?
    """

    PROMOTE = """
        UPDATE profile_facts SET fact_type = 'static', updated_at = ?
        WHERE container_tag = ? AND fact = ? AND fact_type = 'dynamic'
    """

    DELETE_CONTAINER = "DELETE FROM profile_facts WHERE container_tag = ?"

    COUNT_ALL = "SELECT COUNT(*) AS count FROM profile_facts"
