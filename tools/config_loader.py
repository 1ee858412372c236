import os
import yaml


def resolve_path(file_path):
    """相对路径按项目根目录解析；绝对路径原样返回。"""
    if os.path.isabs(file_path):
        return file_path
    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.path.join(project_root, file_path)


def load_config(section=None, file_path="config/axevent.yaml"):
    """
    加载 YAML 配置文件，并返回指定部分配置
    :param section: 配置块名称，例如 'logging' / 'parameters'
    :param file_path: 配置文件路径（相对项目根或绝对路径）
    :raises KeyError: section 不存在
    """
    with open(resolve_path(file_path), 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f) or {}
    if section:
        return config[section]
    return config
