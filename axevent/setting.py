#  配置 / Settings
import os

from commons.normalizers import to_bool_or_none

CONFIG_PATH  = os.getenv("AXEVENT_CONFIG", "config/axevent.yaml")               # YAML 配置文件
LOG_LEVEL    = os.getenv("AXEVENT_LOG_LEVEL", "INFO").upper()                   # DEBUG | INFO | WARNING
LOG_TO_FILE  = bool(to_bool_or_none(os.getenv("AXEVENT_LOG_TO_FILE", "false"))) # 是否写 logs/<name>.log

# ONVIF 主题命名空间（事件总线侧的前缀约定）
ONVIF_NAMESPACE_TNS1    = "tns1"
ONVIF_NAMESPACE_TNSAXIS = "tnsaxis"

# 平台级自定义事件的 topic0
PLATFORM_TOPIC0 = "CameraApplicationPlatform"
