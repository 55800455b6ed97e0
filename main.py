import argparse
import signal
import sys
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Live editor for Line 6 DT25 / DT50 amps")
    parser.add_argument("--list-ports", "-l", action="store_true",
                        help="List MIDI ports and exit")
    parser.add_argument("--in", dest="in_port", metavar="PORT",
                        help="MIDI input port name (overrides the saved setting)")
    parser.add_argument("--out", dest="out_port", metavar="PORT",
                        help="MIDI output port name (overrides the saved setting)")
    parser.add_argument("--config", type=Path, metavar="FILE",
                        help="Use an alternate config file")
    parser.add_argument("--log-midi", action="store_true",
                        help="Log every MIDI datagram sent and received")
    return parser


def list_ports() -> None:
    from midi.device import list_input_ports, list_output_ports
    print("Inputs:")
    for i, name in enumerate(list_input_ports()):
        print(f"  {i}: {name}")
    print("Outputs:")
    for i, name in enumerate(list_output_ports()):
        print(f"  {i}: {name}")


def main(argv=None):
    args = build_parser().parse_args(argv)
    if args.list_ports:
        list_ports()
        return

    from PyQt6.QtCore import QTimer
    from PyQt6.QtWidgets import QApplication
    from core.config import AppConfig
    from ui.main_window import APP_TITLE, MainWindow

    config = AppConfig(path=args.config)
    if args.in_port:
        config.midi_in_port = args.in_port
    if args.out_port:
        config.midi_out_port = args.out_port
    if args.log_midi:
        config.log_midi_traffic = True

    app = QApplication(sys.argv[:1])
    app.setApplicationName(APP_TITLE)

    # Qt's event loop starves Python's signal handling; the idle timer lets
    # Ctrl+C through.
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    timer = QTimer()
    timer.start(200)
    timer.timeout.connect(lambda: None)

    window = MainWindow(config=config)
    app.aboutToQuit.connect(window.session.shutdown)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
