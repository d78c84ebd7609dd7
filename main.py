from rich.pretty import pprint

from optscan import *


flags = (
    Flags("demo", shell=True)
    .set_program_metadata(version="0.1.0", description="show how switches are scanned")
    .add_option("-x, -w, --width <n>", "item width")
    .add_option("-y, --height <n>", "item height")
    .add_option("-v, --verbose", "more output (repeat for even more)")
    .add_version_switch()
    .add_help_switch()
)


if __name__ == '__main__':
    pprint(flags.parse())
