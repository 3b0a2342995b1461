import logging
import sys

from rich.logging import RichHandler

from navarch import *

application = Application(ApplicationOptions(
    "Shipyard",
    "0.1.0",
    author="Shipyard developers",
    year=2025,
    cliname="shipyard",
    descr="Build, launch and inspect vessels.",
))


@application.command("build", "b", descr="Build a vessel from a blueprint")
class Build:
    blueprint = ValueDescriptor("BLUEPRINT", required=True, descr="Blueprint file")
    target = OptionDescriptor("-t", "--target", required=True, descr="Dock to build in")
    tags = OptionDescriptor("--tag", type=list[str], default=["hull"], descr="Extra build tags")
    verbose = OptionDescriptor("-v", "--verbose", type=bool, descr="Report every step")

    def __validate__(self, context):
        if not self.blueprint.endswith(".plan"):
            return f"Blueprint {self.blueprint!r} is not a .plan file."

    def __execute__(self, context):
        print(f"building {self.blueprint} in {self.target} [{', '.join(self.tags)}]")
        return 0


@application.command("fleet", executable=False, descr="Manage the fleet")
class Fleet:
    pass


class Launcher:
    async def __execute__(self, context, options):
        print(f"launching {options.name} (dry run: {options.dry_run})")


@application.command("launch", parent=Fleet, executor=Launcher, descr="Launch a vessel")
class Launch:
    name = ValueDescriptor(required=True)
    dry_run = OptionDescriptor("-n", "--dry-run", type=bool)


@application.command("list", parent=Fleet, default=True, executor=lambda context, options: print("no vessels"))
class List:
    pass


if __name__ == '__main__':
    logging.basicConfig(level=logging.DEBUG, handlers=[RichHandler()], format="%(message)s")
    sys.exit(application.run())
