"""mipview preview application.

Opens an image, renders it as a square power-of-two texture and shows the
rendered frame.

Usage:
    mipview [image] [-c CONFIG] [-v]
"""

import argparse
import sys

from mipview.utils.logger import configure_logging, loggerRaise, set_main_window


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Preview an image as a mipmapped power-of-two texture.')
    parser.add_argument('input_file', nargs='?', help='Image to open.')
    parser.add_argument('-c', '--config', help='JSON configuration file.')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging.')
    return parser.parse_args(argv)


def main(argv=None):
    args = _parse_args(argv)
    configure_logging(args.verbose)

    from PyQt5.QtWidgets import QApplication

    from mipview.components.preview_window import PreviewWindow
    from mipview.config import load_config, load_user_config
    from mipview.errors import MipviewError
    from mipview.services.export_controller import FileSink
    from mipview.services.texture_pipeline import TexturePipeline
    from mipview.utils.gl_context import OffscreenGLContext

    app = QApplication(sys.argv[:1])

    try:
        config = load_config(args.config) if args.config else load_user_config()
        gl_context = OffscreenGLContext()
    except MipviewError as e:
        loggerRaise(e, f"mipview could not start:\n{e}")

    pipeline = TexturePipeline(config, sink=FileSink(config.output_dir))
    window = PreviewWindow(pipeline, gl_context)
    set_main_window(window)

    if args.input_file:
        window.open_file(args.input_file)

    window.show()
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
