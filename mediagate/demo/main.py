"""
mediagate Demo Application

This demo walks through the moderation flow:
- Read grants between agents
- Publishing a resource
- Flagging by a stranger and what it hides
- Super-agent deflag and administrative approval
- Audit log retrieval
"""

import asyncio
import sys

from mediagate.core.config import Config, StaticSuperAgentSetting
from mediagate.core.service import MediaGate
from mediagate.core.types import Agent, AgentID, ResourceKind


SUDO_EMAIL = "root@example.com"


def show(label: str, result) -> None:
    if result.success:
        advisories = f" (advisories: {', '.join(str(a) for a in result.advisories)})" if result.advisories else ""
        print(f"✓ {label}{advisories}")
    else:
        print(f"✗ {label}: {result.reason} - {result.message}")


async def run_demo() -> int:
    """Main demo function"""
    print("mediagate Demo Application")
    print("=" * 50)
    print()

    gate = MediaGate.new(Config(), super_agent=StaticSuperAgentSetting(SUDO_EMAIL))
    daniel = Agent(id=AgentID("daniel"), email="daniel@example.com", can_read=[AgentID("troy")])
    troy = Agent(id=AgentID("troy"), email="troy@example.com")
    lanny = Agent(id=AgentID("lanny"), email="lanny@example.com")
    root = Agent(id=AgentID("root"), email=SUDO_EMAIL)
    for agent in (daniel, troy, lanny, root):
        await gate.agents.save(agent)

    print("Step 1: Upload and Read Grants")
    print("-" * 40)
    upload = await gate.register_upload(daniel.identity, ResourceKind.IMAGE,
                                        "example.com/daniel/sunset.jpg", "Sunset")
    show("daniel uploaded an image", upload)
    image_id = upload.resource.id
    show("troy views it (granted by daniel)", await gate.view(troy.identity, image_id))
    show("lanny views it", await gate.view(lanny.identity, image_id))
    print()

    print("Step 2: Publish and Flag")
    print("-" * 40)
    show("daniel publishes", await gate.publish(daniel.identity, image_id))
    show("lanny views it", await gate.view(lanny.identity, image_id))
    show("lanny flags it", await gate.flag(lanny.identity, image_id))
    show("troy views it", await gate.view(troy.identity, image_id))
    show("daniel views it", await gate.view(daniel.identity, image_id))
    print()

    print("Step 3: Super-Agent Review")
    print("-" * 40)
    flagged = await gate.list_flagged(root.identity)
    print(f"✓ root sees {len(flagged.items)} flagged resource(s)")
    show("root deflags", await gate.deflag(root.identity, image_id))
    show("lanny flags again", await gate.flag(lanny.identity, image_id))
    print()

    print("Step 4: Audit Log")
    print("-" * 40)
    events = await gate.get_audit_logger().get_events()
    for event in events:
        outcome = "allowed" if event.details.get("success") else event.details.get("reason")
        print(f"  - {event.event_type:<10} {event.agent_id or 'anonymous':<8} {outcome}")
    print()

    await gate.close()
    print("Demo completed successfully!")
    return 0


def main() -> int:
    try:
        return asyncio.run(run_demo())
    except KeyboardInterrupt:
        print("\nDemo interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
