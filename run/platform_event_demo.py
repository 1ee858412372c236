# run/platform_event_demo.py
"""
=========================================
平台事件演示入口
=========================================

功能说明：
  - 读取 config/axevent.yaml 与应用清单（AppSetup）
  - 声明一个 CameraApplicationPlatform 事件（port 为 source，state 为 data）
  - 订阅该事件，收到后用 EventRecord 还原成 PortState 记录
  - 参数 IsCustomized 变化时，把新值作为事件发送出去
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import ClassVar, Dict

from acap.event_bus import LocalEventBus
from acap.parameters import LocalParameterStore
from axevent.manifest import load_app_setup
from axevent.markers import DataMark, NiceNames, SourceMark
from axevent.marshal import EventRecord
from axevent.models import Event, KeyValueEntry
from axevent.setting import CONFIG_PATH, LOG_LEVEL, LOG_TO_FILE, ONVIF_NAMESPACE_TNSAXIS, PLATFORM_TOPIC0
from axevent.topics import new_camera_application_platform_event, new_tns_axis_event
from axevent.typed_value import ValueType
from commons.base_logger import BaseLogger
from tools.config_loader import load_config

logger = BaseLogger(name="axevent.demo", level=LOG_LEVEL, to_file=LOG_TO_FILE).logger


@dataclass
class PortState(EventRecord):
    port: int = 0
    active: bool = False
    customized: str = ""

    FIELD_MAPPING: ClassVar[Dict[str, str]] = {"state": "active"}


async def main() -> None:
    setup = load_app_setup(load_config("manifest", CONFIG_PATH))
    params = LocalParameterStore.from_config(setup.app_name, CONFIG_PATH)
    logger.info("SerialNumber: %s", params.get("Properties.System.SerialNumber"))

    declaration = new_camera_application_platform_event(
        setup,
        "PortActive",
        event_nice_name="Port active",
        key_values=[
            KeyValueEntry("port", 1, ValueType.INTEGER),
            KeyValueEntry("state", False, ValueType.BOOLEAN),
            KeyValueEntry("customized", "no", ValueType.STRING),
        ],
        source_markers=[SourceMark("port")],
        data_markers=[DataMark("state")],
        nice_names=[NiceNames("port", key_nice_name="Port")],
    )
    declaration.ensure_trigger_eligible()

    bus = LocalEventBus()
    declaration_id = bus.declare(declaration, stateless=False)

    async def on_event(ev: Event) -> None:
        record = PortState.from_event(ev)
        logger.info("received %s via subscription #%s", record, ev.subscription_id)

    bus.subscribe(new_tns_axis_event(PLATFORM_TOPIC0, setup.app_name, "PortActive"), on_event)

    loop = asyncio.get_running_loop()
    pending = []

    def on_param(name: str, value: str, userdata) -> None:
        logger.info("Param Callback Invoked, Parameter Name: %s, Value: %s, Userdata: %s", name, value, userdata)
        kvs = PortState(port=userdata, active=value == "yes", customized=value).to_key_value_set()
        pending.append(loop.create_task(bus.send(declaration_id, kvs)))

    params.register_callback("IsCustomized", on_param, 1)
    params.set("IsCustomized", "yes")
    await asyncio.gather(*pending)

    topic2 = declaration.nice_names("topic2", ONVIF_NAMESPACE_TNSAXIS)
    logger.info("declared %s as %r", declaration.to_json(), topic2.value_nice_name if topic2 else None)


if __name__ == "__main__":
    asyncio.run(main())
