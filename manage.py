import click

from soporte import create_app
from soporte.services.store import get_store

app = create_app()


@app.cli.command("check-store")
def check_store() -> None:
    """Verificar que el almacén responde."""

    store = get_store()
    click.echo(f"Store: {store.estado.value} (ping={'ok' if store.ping() else 'error'})")


if __name__ == "__main__":
    app.cli.main()
