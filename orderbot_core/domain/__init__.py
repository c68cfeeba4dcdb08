"""领域层模型与异常。

包含：
- models: 输入载荷、请求描述与 ServiceResponse 等数据结构。
- exceptions: TransportError / ProtocolError / EncodingError 等业务异常。
"""
