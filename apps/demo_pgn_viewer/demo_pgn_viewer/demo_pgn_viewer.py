import reflex as rx
from variation_viewer import ViewerSettings, chess_viewer, setup_logging

setup_logging(ViewerSettings.from_env())


def index():
    return rx.center(
        rx.box(chess_viewer(), width="min(1200px, 100%)"),
        padding="16px",
        width="100%",
    )


app = rx.App()
app.add_page(index, route="/", title="Variation board")
