"""Shared fixtures: platform key material and independently generated vectors."""

CORP_ID = "wx5823bf96d3bd56c7"
TOKEN = "QDG6eK"
ENCODING_AES_KEY = "jWmYm7qr5nMoAUwZRjGtBxmz3KA1tkAj3ykkR6q2B2C"
AES_KEY_HEX = "8d69989bbaabe67328014c194631ad0719b3dca035b64023df292447aab60760"

# URL verification handshake published in the platform documentation
ECHO_SIGNATURE = "5c45ff5e21c57e6ad56bac8758b79b1d9ac89fd3"
ECHO_TIMESTAMP = "1409659589"
ECHO_NONCE = "263014780"
ECHO_STR = (
    "P9nAzCzyDtyTWESHep1vC5X9xho/qYX3Zpb4yKa9SKld1DsH3Iyt3tP3zNdtp+4RPcs8TgAE7OaBO+FZXvnaqQ=="
)
ECHO_PLAINTEXT = "1616140317555161061"

# Contact-change notification encrypted with openssl, random prefix b"abcdefghijklmnop"
MESSAGE_RANDOM = b"abcdefghijklmnop"
MESSAGE_TIMESTAMP = "1409659813"
MESSAGE_NONCE = "1372623149"
MESSAGE_XML = (
    "<xml><ToUserName><![CDATA[wx5823bf96d3bd56c7]]></ToUserName>"
    "<FromUserName><![CDATA[sys]]></FromUserName>"
    "<CreateTime>1403610513</CreateTime>"
    "<MsgType><![CDATA[event]]></MsgType>"
    "<Event><![CDATA[change_contact]]></Event>"
    "<ChangeType>create_user</ChangeType>"
    "<UserID><![CDATA[zhangsan]]></UserID>"
    "<Name><![CDATA[张三]]></Name>"
    "<Department><![CDATA[1,2,3]]></Department>"
    "<ExtAttr><Item><Name>爱好</Name><Type>0</Type><Value>旅游</Value></Item></ExtAttr>"
    "</xml>"
)
MESSAGE_ENCRYPT = (
    "7ho9XWI/HTOA1L6oduAxX8u2DeerlnvGrtpswPGmUry4Rypy9IjJFsujhVr2LH0vSl77QQFFF/QSbjbAV1RfAFMMpbyb"
    "5lDs9+T/xvLYEXr2vLv7+By/qxY8q1WgSVKLuBNN4CAjmPoy4luvglvZc1z4Sq6LGwgyC1J8M0HPKo62UvVNShduWgbS"
    "wIsu/qSspfgyZcvKBzpeg7Vl4R1ioQKsDI8uNyDL5tduPNHJYlFhK4yLJLBOyGN8FCWJ84woKe97XOutFPApieCoyoe8"
    "w7CxuG5PRPuJ01XOMBi85er9SIveZymz+gH7p/0KQAPKfUPxgXRISow5WlwF4slDLfzXEKF4o8lzsT7imoSluJa3G+hi"
    "EKV4a8kmiyFdJUwXyJbxOry48FmgMS6viiZtvZiaZ9IKeok8xDFhrjwcd5bXhDW3C1JCq+TCF89BpPILokjVv9KQfmVy"
    "1fjWJl6MgYz2ZYG2tYvMyw45cF5G7NCVKR8KmOvApqdFQ5GHpcfDa8IHtM363USUTU1aAr/qPtIkw1z5lqm+IviIqMUz"
    "Zke5nLc8GwEM8YJqliCXa41hgzoOyyM7jRf+tYCXiIpmU8M233pTy6HlRLzJJnY5Kk+kLr5u2WQFQbOGaWeCwoeevj5N"
    "uqG/IcW50PHofwZZ0I2GBKPOB1/hdQA2FLmsOWQ="
)
MESSAGE_SIGNATURE = "6f8e40d731c1fabf7f1fc50429920eb415997e42"

# JS-SDK signature published in the platform documentation
JSAPI_TICKET = (
    "sM4AOVdWfPE4DxkXGEs8VMCPGGVi4C3VM0P37wVUCFvkVAy"
    "_90u5h9nbSlYy3-Sl-HhTdfl2fzFy1AOcHKP7qg"
)
JSAPI_NONCE = "Wm3WZYTPz0wzccnW"
JSAPI_TIMESTAMP = 1414587457
JSAPI_URL = "http://mp.weixin.qq.com?params=value"
JSAPI_SIGNATURE = "0f9de62fce790f9a083d5c99e95740ceb90c27ed"


def callback_body(encrypt: str = MESSAGE_ENCRYPT) -> str:
    """POST body as delivered by the platform."""
    return (
        f"<xml><ToUserName><![CDATA[{CORP_ID}]]></ToUserName>"
        f"<Encrypt><![CDATA[{encrypt}]]></Encrypt>"
        "<AgentID><![CDATA[218]]></AgentID></xml>"
    )
