"""CLI commands for product images."""

from __future__ import annotations

import mimetypes
from pathlib import Path

import click

from storefront.application.delete_product_image import DeleteProductImageHandler
from storefront.application.migrate_legacy_images import MigrateLegacyImagesHandler
from storefront.application.replace_product_image import ReplaceProductImageHandler
from storefront.application.show_product_images import ShowProductImagesHandler
from storefront.application.upload_product_images import UploadProductImagesHandler
from storefront.domain.exceptions import DomainException
from storefront.domain.service.hybrid_upload_orchestrator import IncomingFile
from storefront.infrastructure.bootstrap import (
    image_resolver,
    local_image_store,
    product_repository,
    remote_configured,
    settings,
    upload_orchestrator,
)


@click.command("upload")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--color", default="", help="Attach to this color instead of the product.")
@click.option(
    "--file",
    "paths",
    required=True,
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Image file. Repeatable.",
)
@click.option("--no-wait", is_flag=True, default=False,
              help="Do not wait for remote replication (queued uploads are dropped).")
def image_upload(product_id: str, color: str, paths: tuple[Path, ...], no_wait: bool) -> None:
    """Store images locally and replicate them to the remote store."""
    files = [
        IncomingFile(
            data=path.read_bytes(),
            original_name=path.name,
            content_type=mimetypes.guess_type(path.name)[0],
        )
        for path in paths
    ]

    orchestrator = upload_orchestrator()
    handler = UploadProductImagesHandler(
        product_repo=product_repository(),
        orchestrator=orchestrator,
        folder_root=settings().remote_folder_root,
        replicate=remote_configured(),
    )

    try:
        tickets = handler.handle(product_id, files, color=color)
    except DomainException as exc:
        orchestrator.shutdown(drain=False)
        raise click.ClickException(str(exc))

    for ticket in tickets:
        click.echo(f"Stored {ticket.record.original_name} as {ticket.record.local_path}")

    # a one-shot process has to finish the queue before it exits
    orchestrator.shutdown(drain=not no_wait)
    stats = orchestrator.stats()
    click.echo(f"Replicated: {stats.completed}, failed: {stats.failed}")


@click.command("replace")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--image", "image_ref", required=True,
              help="Filename or URL of the image to replace.")
@click.option("--color", default="", help="The image belongs to this color.")
@click.option("--file", "path", required=True,
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="New image file.")
def image_replace(product_id: str, image_ref: str, color: str, path: Path) -> None:
    """Swap one image for a new file and discard the old one."""
    orchestrator = upload_orchestrator()
    handler = ReplaceProductImageHandler(
        product_repo=product_repository(),
        orchestrator=orchestrator,
        folder_root=settings().remote_folder_root,
        replicate=remote_configured(),
    )
    incoming = IncomingFile(
        data=path.read_bytes(),
        original_name=path.name,
        content_type=mimetypes.guess_type(path.name)[0],
    )

    try:
        ticket = handler.handle(product_id, image_ref, incoming, color=color)
    except DomainException as exc:
        orchestrator.shutdown(drain=False)
        raise click.ClickException(str(exc))

    click.echo(f"Replaced {image_ref} with {ticket.record.local_path}")
    orchestrator.shutdown(drain=True)
    stats = orchestrator.stats()
    click.echo(f"Replicated: {stats.completed}, failed: {stats.failed}")


@click.command("delete")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--image", "image_ref", required=True,
              help="Filename or URL of the image to delete.")
@click.option("--color", default="", help="The image belongs to this color.")
def image_delete(product_id: str, image_ref: str, color: str) -> None:
    """Remove one image from a product and from both stores."""
    orchestrator = upload_orchestrator()
    handler = DeleteProductImageHandler(
        product_repo=product_repository(),
        orchestrator=orchestrator,
    )

    try:
        remaining = handler.handle(product_id, image_ref, color=color)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    finally:
        orchestrator.shutdown(drain=False)

    click.echo(f"Deleted {image_ref}, {remaining} image(s) left.")


@click.command("show")
@click.option("--id", "product_id", required=True, help="Product ID.")
def image_show(product_id: str) -> None:
    """Show each image's display URL and replication state."""
    handler = ShowProductImagesHandler(
        product_repo=product_repository(),
        resolver=image_resolver(),
    )

    try:
        images = handler.handle(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not images:
        click.echo("No images.")
        return
    click.echo(f"  {'Color':<10} {'Mode':<8} {'Status':<13} URL")
    click.echo(f"  {'-'*70}")
    for img in images:
        click.echo(
            f"  {img.color or '-':<10} {img.storage_mode:<8} {img.migration_status:<13} "
            f"{img.display_url}"
        )


@click.command("migrate")
@click.option("--id", "product_id", default=None, help="Only this product (all if omitted).")
@click.option("--dry-run", is_flag=True, default=False, help="Only report what would be queued.")
def image_migrate(product_id: str | None, dry_run: bool) -> None:
    """Replicate local-only and legacy images to the remote store."""
    cfg = settings()
    orchestrator = upload_orchestrator()
    handler = MigrateLegacyImagesHandler(
        product_repo=product_repository(),
        local_store=local_image_store(),
        orchestrator=orchestrator,
        folder_root=cfg.remote_folder_root,
        upload_url_prefix=cfg.upload_url_prefix,
        remote_configured=remote_configured(),
    )

    try:
        report = handler.handle(product_id, dry_run=dry_run)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    finally:
        orchestrator.shutdown(drain=True)

    verb = "Would queue" if report.dry_run else "Queued"
    click.echo(f"{verb} {report.queued} image(s), skipped {report.skipped}, "
               f"across {report.products} product(s).")
    if not report.dry_run:
        stats = orchestrator.stats()
        click.echo(f"Replicated: {stats.completed}, failed: {stats.failed}")
