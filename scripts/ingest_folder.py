"""CLI helper - split every ``.md`` / ``.txt`` under a directory into a knowledge base.

Usage::

    python -m scripts.ingest_folder ~/Notes my-notes_4f1c...
    python -m scripts.ingest_folder ~/Notes unused --dry-run --chunk-size 400
"""

from __future__ import annotations

import pathlib

import click

from rag_server.core.knowledge_base import KnowledgeBaseService
from rag_server.core.splitting import LLM
from rag_server.core.splitting import RECURSIVE
from rag_server.core.splitting import SplitValidationError
from rag_server.core.splitting import split_with

TEXT_SUFFIXES = {".md", ".txt"}


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument(
    "directory", type=click.Path(exists=True, file_okay=False, path_type=pathlib.Path)
)
@click.argument("collection")
@click.option("--chunk-size", type=click.IntRange(min=1), default=None)
@click.option("--chunk-overlap", type=click.IntRange(min=0), default=None)
@click.option(
    "--type",
    "split_type",
    type=click.Choice([RECURSIVE, LLM]),
    default=RECURSIVE,
    show_default=True,
)
@click.option("--dry-run", is_flag=True, help="Split files but skip the upload.")
def main(
    directory: pathlib.Path,
    collection: str,
    chunk_size: int | None,
    chunk_overlap: int | None,
    split_type: str,
    dry_run: bool,
    service: KnowledgeBaseService | None = None,
) -> None:
    """Split every text file under *DIRECTORY* and add it to *COLLECTION*."""
    if service:
        kb = service
    elif dry_run:
        kb = None
    else:
        kb = KnowledgeBaseService()

    paths = sorted(p for p in directory.rglob("*") if p.suffix in TEXT_SUFFIXES)
    if not paths:
        click.echo("No text files found - exiting.")
        raise SystemExit(0)

    total = 0
    with click.progressbar(paths, label="Ingesting files...") as bar:
        for p in bar:
            text = p.read_text(encoding="utf-8")
            if not text.strip():
                continue
            try:
                result = split_with(
                    split_type,
                    text,
                    chunk_size=chunk_size,
                    chunk_overlap=chunk_overlap,
                    metadata={"source": str(p)},
                )
            except SplitValidationError as e:
                raise click.BadParameter(str(e)) from e
            if not result.ok:
                click.echo(f"\nSkipping {p}: {result.error}", err=True)
                continue

            total += len(result.chunks)
            if kb and result.chunks:
                if kb.add_documents(collection, result.chunks) is None:
                    raise click.ClickException(f"Upload failed for {p}")

    click.echo(f"Done. {total} chunks from {len(paths)} files.")


if __name__ == "__main__":  # pragma: no cover
    main()
