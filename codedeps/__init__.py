"""
codedeps: Incremental symbol indexing and file dependency graphs.

codedeps indexes a source tree into a SQLite store of per-file symbol trees
and cross-file references, enabling you to:
- Re-index only files whose timestamps changed
- Resolve references to stable symbol identities
- Render a weighted file-level dependency graph

Usage:
    from codedeps.core import IndexRepository, get_default_db_path
    from codedeps.core.discovery import enumerate_files
    from codedeps.core.indexer import Indexer

    async with IndexRepository(get_default_db_path(root)) as repo:
        indexer = Indexer.for_root(repo, root)
        await indexer.ensure_schema()
        stats = await indexer.index(enumerate_files(root, associations), root)
"""

__version__ = "0.1.0"
